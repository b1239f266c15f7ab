from app.models.enums import MessageType, QuickReplyCategory, UrgencyLevel
from app.services.coach_replies import FALLBACK_PROMPT, parse_traces


def test_plain_strings_become_texts():
    reply = parse_traces(['A', 'B'])
    assert [item.content for item in reply.texts] == ['A', 'B']
    assert reply.choices == []
    assert reply.is_ending is False


def test_text_traces_with_metadata():
    reply = parse_traces(
        [
            {
                'type': 'text',
                'payload': {
                    'message': 'Please call someone you trust.',
                    'metadata': {'messageType': 'crisis', 'urgencyLevel': 'crisis'},
                },
            }
        ]
    )
    metadata = reply.texts[0].metadata
    assert metadata is not None
    assert metadata.message_type == MessageType.CRISIS
    assert metadata.urgency_level == UrgencyLevel.CRISIS


def test_invalid_metadata_is_dropped():
    reply = parse_traces([{'type': 'text', 'payload': {'message': 'hi', 'metadata': {'messageType': 'panic'}}}])
    assert reply.texts[0].content == 'hi'
    assert reply.texts[0].metadata is None


def test_choice_traces_become_ai_quick_replies():
    reply = parse_traces(
        [
            {'type': 'text', 'payload': {'message': 'Pick one'}},
            {
                'type': 'choice',
                'payload': {
                    'buttons': [
                        {'name': 'Breathe with me', 'request': {'type': 'path-breathe'}},
                        {'name': ''},
                    ]
                },
            },
        ]
    )
    assert len(reply.choices) == 1
    choice = reply.choices[0]
    assert choice.text == 'Breathe with me'
    assert choice.category == QuickReplyCategory.AI_GENERATED
    assert choice.request == {'type': 'path-breathe'}


def test_end_trace_and_unknown_types():
    reply = parse_traces([{'type': 'visual'}, {'type': 'text', 'payload': {'message': 'Bye'}}, {'type': 'end'}])
    assert [item.content for item in reply.texts] == ['Bye']
    assert reply.is_ending is True


def test_fallback_when_nothing_displayable():
    reply = parse_traces([{'type': 'debug', 'payload': {}}, '   '])
    assert [item.content for item in reply.texts] == [FALLBACK_PROMPT]
    assert reply.texts[0].is_fallback is True
    assert parse_traces(['Hi']).texts[0].is_fallback is False
