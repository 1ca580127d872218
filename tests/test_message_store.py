"""Tests for the bounded message store and message schemas."""
import pytest

from msgboard.schemas import Message, Notification
from msgboard.services.messages import MAX_MESSAGES, MessageStore


class TestAdd:
    """Tests for adding messages."""

    @pytest.mark.parametrize('text', ['', ' ', 'a', '  a  ', '\n'])
    def test_rejects_short_text(self, store, text):
        """Anything shorter than two characters after trimming is rejected."""
        assert store.add(text) is None
        assert len(store) == 0

    def test_accepts_two_characters(self, store):
        message = store.add('ok')

        assert message is not None
        assert message.text == 'ok'
        assert store.list()[0]['text'] == 'ok'

    def test_trims_text(self, store):
        message = store.add('   hello there  ')
        assert message.text == 'hello there'

    def test_rejects_non_string(self, store):
        assert store.add(None) is None
        assert store.add(42) is None

    def test_truncates_to_max_length(self, store):
        """Long texts are cut, not rejected."""
        message = store.add('x' * 50, max_length=10)

        assert message.text == 'x' * 10
        assert store.list()[0]['text'] == 'x' * 10

    def test_record_shape(self, store):
        record = store.add('hello').to_dict()

        assert set(record) == {'id', 'text', 'createdAt'}
        assert record['createdAt'].endswith('Z')

    def test_unique_ids(self, store):
        first = store.add('first')
        second = store.add('second')
        assert first.id != second.id


class TestCapacity:
    """The store never holds more than MAX_MESSAGES records."""

    def test_eleventh_message_evicts_oldest(self, store):
        for i in range(MAX_MESSAGES):
            store.add(f'message {i}')
        assert len(store) == MAX_MESSAGES

        store.add('message 10')

        texts = [m['text'] for m in store.list()]
        assert len(texts) == MAX_MESSAGES
        assert 'message 0' not in texts
        assert texts[0] == 'message 10'
        assert texts[-1] == 'message 1'

    def test_list_is_most_recent_first(self, store):
        store.add('one')
        store.add('two')
        store.add('three')

        assert [m['text'] for m in store.list()] == ['three', 'two', 'one']

    def test_seed_messages(self):
        seeded = MessageStore(seed=['first seed', 'second seed', 'x'])

        assert [m['text'] for m in seeded.list()] == ['second seed', 'first seed']

    def test_list_returns_copies(self, store):
        store.add('original')

        store.list()[0]['text'] = 'tampered'

        assert store.list()[0]['text'] == 'original'


class TestEditDelete:
    """Tests for editing and deleting by id."""

    def test_edit_unknown_id(self, store):
        store.add('hello')
        before = store.list()

        assert store.edit({'id': 'missing', 'text': 'changed', 'createdAt': 'x'}) is False
        assert store.list() == before

    def test_edit_replaces_wholesale(self, store):
        message = store.add('hello')
        store.add('other')

        replacement = {'id': message.id, 'text': 'edited', 'createdAt': '2024-01-01T00:00:00Z'}
        assert store.edit(replacement) is True

        assert store.get(message.id) == replacement
        assert [m['text'] for m in store.list()] == ['other', 'edited']

    def test_edit_without_timestamp_keeps_original(self, store):
        message = store.add('hello')

        assert store.edit({'id': message.id, 'text': 'edited'}) is True

        assert store.get(message.id) == {
            'id': message.id,
            'text': 'edited',
            'createdAt': message.created_at,
        }

    def test_edit_malformed_record(self, store):
        store.add('hello')

        assert store.edit(None) is False
        assert store.edit({'text': 'no id'}) is False
        assert store.edit('not a record') is False

    def test_delete_unknown_id(self, store):
        store.add('one')
        store.add('two')
        before = store.list()

        assert store.delete('missing') == before

    def test_delete_removes_exactly_one(self, store):
        one = store.add('one')
        store.add('two')
        store.add('three')

        remaining = store.delete(one.id)

        assert [m['text'] for m in remaining] == ['three', 'two']
        assert store.get(one.id) is None
        assert len(store) == 2

    def test_capacity_kept_after_delete(self, store):
        first = store.add('first')
        store.delete(first.id)

        for i in range(MAX_MESSAGES + 2):
            store.add(f'message {i}')

        assert len(store) == MAX_MESSAGES


class TestSchemas:
    """Tests for Message and Notification value objects."""

    def test_message_with_max_length_keeps_identity(self):
        message = Message.create('hello world')
        truncated = message.with_max_length(5)

        assert truncated.text == 'hello'
        assert truncated.id == message.id
        assert message.text == 'hello world'

    def test_message_accepts_wire_names(self):
        message = Message.model_validate({'id': 'abc', 'text': 'hi', 'createdAt': 'now'})
        assert message.created_at == 'now'

    def test_notification(self):
        notification = Notification(title=' Heads up ', text=' Doors open ')
        data = notification.to_dict()

        assert data['title'] == 'Heads up'
        assert data['text'] == 'Doors open'
        assert data['id']
        assert data['createdAt']

    def test_notification_title_optional(self):
        assert Notification.model_validate({'text': 'hi', 'title': None}).title == ''

    def test_notification_requires_text(self):
        with pytest.raises(ValueError):
            Notification(title='t', text='   ')
