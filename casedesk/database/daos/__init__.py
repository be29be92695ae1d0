"""
DAOs Package - Data Access Layer (SQLAlchemy 2.0)
=================================================

The `daos` package provides the Data Access Layer for the application.
It encapsulates all interactions with SQLAlchemy ORM entities, providing
clean CRUD APIs for the service layer while hiding direct query details.

Conventions
-----------
- Session lifecycle (open/commit/rollback) is handled by callers,
  normally through `@transactional`
- DAOs log and re-raise so upper layers decide error policy

Contents
--------
- UserDao
    Creates users with password hashing, looks them up, manages tokens.

- CaseDao
    Creates cases and answers the owner-scoped "active case" query, with an
    optional row lock for aggregate updates.

- DocumentDao
    Creates, fetches (owner-scoped), lists and deletes documents.

- CaseMessageDao
    Appends to and reads a case transcript (timestamp ascending, questions
    before answers on ties).

- CaseFileDao
    Persists uploaded-file metadata and cached extracted text.
"""
