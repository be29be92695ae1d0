"""
Persistence layer for cases, documents, chat messages, uploaded files and users.

Contents:
    - config:
        Settings (pydantic-settings) and the SQLAlchemy engine and metadata.

    - entities:
        ORM models: users, cases, documents, case messages and case files.

    - daos:
        Data Access Objects with the queries each service needs. DAOs never
        commit.

    - core:
        Service functions behind the HTTP routes: case and document
        management, case chat, case files and accounts. Errors surface as
        `CaseDeskError` subclasses.

    - helpers:
        The `@transactional` decorator that owns session and transaction scope.
"""
