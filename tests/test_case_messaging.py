from unittest.mock import MagicMock

import pytest
from langchain_core.messages import AIMessage

from casedesk.api.llm_pipeline import (
    REPLY_NO_DOCUMENTS,
    REPLY_NOT_CONFIGURED,
    REPLY_SERVICE_UNAVAILABLE,
    CaseReplyGenerator,
    ContextAssembler,
)
from casedesk.database.core import case_funcs, document_funcs
from casedesk.database.core.case_messaging import get_case_messages, send_message_to_case_ai
from casedesk.database.core.exceptions import CaseNotFoundError, NotAuthenticatedError


@pytest.fixture
def case(user):
    return case_funcs.create_case(user_id=user.id, name="Smith v. Jones", description="Lease dispute")


def attach(user, case, title, content):
    document = document_funcs.create_document(user_id=user.id, title=title, content=content)
    case_funcs.add_document_to_case(user_id=user.id, case_id=case.id, document_id=document.id)
    return document


def test_empty_case_answers_without_calling_model(user, case, generator, chat_model):
    reply = send_message_to_case_ai(user_id=user.id, case_id=case.id, content="Anything?", generator=generator)

    assert reply.ai_response == REPLY_NO_DOCUMENTS
    chat_model.invoke.assert_not_called()
    messages = get_case_messages(user_id=user.id, case_id=case.id)
    assert [m.is_ai for m in messages] == [False, True]
    assert messages[1].content == REPLY_NO_DOCUMENTS


def test_question_and_answer_are_stored_in_order(user, case, generator, chat_model):
    attach(user, case, "Memo", "Hello world")

    reply = send_message_to_case_ai(user_id=user.id, case_id=case.id, content="What does it say?",
                                    generator=generator)

    assert reply.ai_response == "Grounded answer (Contract)."
    messages = get_case_messages(user_id=user.id, case_id=case.id)
    assert [m.id for m in messages] == [reply.user_message_id, reply.ai_message_id]
    question, answer = messages
    assert question.content == "What does it say?"
    assert not question.is_ai
    assert answer.is_ai
    assert question.timestamp <= answer.timestamp
    assert question.author_id == user.id

    user_prompt = chat_model.invoke.call_args.args[0][1].content
    assert "Case: Smith v. Jones" in user_prompt
    assert "Description: Lease dispute" in user_prompt
    assert "What does it say?" in user_prompt
    assert user_prompt.count("Hello world") == 1


def test_transport_failure_is_persisted_as_fallback(user, case):
    attach(user, case, "Memo", "Hello world")
    model = MagicMock()
    model.invoke.side_effect = TimeoutError("upstream timed out")
    generator = CaseReplyGenerator(model, ContextAssembler())

    reply = send_message_to_case_ai(user_id=user.id, case_id=case.id, content="Q", generator=generator)

    assert reply.ai_response == REPLY_SERVICE_UNAVAILABLE
    messages = get_case_messages(user_id=user.id, case_id=case.id)
    assert len(messages) == 2
    assert messages[1].content == REPLY_SERVICE_UNAVAILABLE


def test_unconfigured_ai_still_records_both_messages(user, case):
    attach(user, case, "Memo", "Hello world")
    reply = send_message_to_case_ai(user_id=user.id, case_id=case.id, content="Q",
                                    generator=CaseReplyGenerator(None, ContextAssembler()))
    assert reply.ai_response == REPLY_NOT_CONFIGURED
    assert len(get_case_messages(user_id=user.id, case_id=case.id)) == 2


def test_generator_crash_still_stores_an_answer(user, case):
    generator = MagicMock()
    generator.generate.side_effect = RuntimeError("bug")
    reply = send_message_to_case_ai(user_id=user.id, case_id=case.id, content="Q", generator=generator)
    assert reply.ai_response == REPLY_SERVICE_UNAVAILABLE
    assert len(get_case_messages(user_id=user.id, case_id=case.id)) == 2


def test_non_owner_is_rejected_before_any_write(user, other_user, case, generator, chat_model):
    with pytest.raises(CaseNotFoundError):
        send_message_to_case_ai(user_id=other_user.id, case_id=case.id, content="Let me in", generator=generator)
    with pytest.raises(NotAuthenticatedError):
        send_message_to_case_ai(user_id=None, case_id=case.id, content="Anonymous", generator=generator)

    chat_model.invoke.assert_not_called()
    assert get_case_messages(user_id=user.id, case_id=case.id) == []
    assert get_case_messages(user_id=other_user.id, case_id=case.id) == []


def test_deleted_case_rejects_messages(user, case, generator):
    case_funcs.delete_case(user_id=user.id, case_id=case.id)
    with pytest.raises(CaseNotFoundError):
        send_message_to_case_ai(user_id=user.id, case_id=case.id, content="Q", generator=generator)


def test_transcript_keeps_exchanges_in_order(user, case, generator, chat_model):
    attach(user, case, "Memo", "Hello world")
    chat_model.invoke.side_effect = [AIMessage(content="first answer"), AIMessage(content="second answer")]

    send_message_to_case_ai(user_id=user.id, case_id=case.id, content="first question", generator=generator)
    send_message_to_case_ai(user_id=user.id, case_id=case.id, content="second question", generator=generator)

    contents = [m.content for m in get_case_messages(user_id=user.id, case_id=case.id)]
    assert contents == ["first question", "first answer", "second question", "second answer"]
