"""
Tests for conversations and messages.
"""
import json
from uuid import uuid4

from django.contrib.auth import get_user_model
from django.test import Client, TestCase

from apps.core.errors import NotFoundError, ValidationFailed
from apps.identity.models import UserRole
from apps.messaging import services
from apps.messaging.dtos import StartConversationIn
from apps.messaging.models import Conversation, Message
from apps.notifications.models import Notification, NotificationType

User = get_user_model()

HELLO = "Hello, are you available this weekend?"


def make_user(role=UserRole.CUSTOMER, **extra):
    return User.objects.create_user(
        email=f"user_{uuid4().hex[:8]}@test.com",
        password="Testpass123",
        role=role,
        preferred_language='en',
        **extra,
    )


class ConversationTest(TestCase):

    def setUp(self):
        self.customer = make_user(first_name="Amina")
        self.tasker = make_user(role=UserRole.TASKER, first_name="Youssef")

    def start(self, **overrides):
        data = dict(recipient_id=self.tasker.id, initial_message=HELLO)
        data.update(overrides)
        return services.start_conversation(self.customer, StartConversationIn(**data))

    def test_start_posts_first_message(self):
        dto = self.start()
        self.assertEqual(dto.other_participant.id, self.tasker.id)
        self.assertEqual(dto.last_message.content, HELLO)
        self.assertIsNotNone(dto.last_message_at)
        self.assertTrue(Notification.objects.filter(
            user=self.tasker, notification_type=NotificationType.MESSAGE_RECEIVED
        ).exists())

    def test_start_reuses_conversation(self):
        first = self.start()
        second = self.start(initial_message="Following up on my earlier question.")
        self.assertEqual(first.id, second.id)
        self.assertEqual(Message.objects.filter(conversation_id=first.id).count(), 2)

    def test_service_scoped_conversation(self):
        general = self.start()
        service_id = uuid4()
        scoped = self.start(service_id=service_id)
        self.assertNotEqual(general.id, scoped.id)
        self.assertEqual(self.start(service_id=service_id).id, scoped.id)
        self.assertEqual(Conversation.objects.count(), 2)

    def test_start_validation(self):
        with self.assertRaises(ValidationFailed):
            self.start(recipient_id=self.customer.id)
        with self.assertRaises(ValidationFailed):
            self.start(initial_message="Hi")
        with self.assertRaises(NotFoundError):
            self.start(recipient_id=uuid4())

    def test_unread_and_mark_read(self):
        dto = self.start()
        services.send_message(self.tasker, dto.id, "Yes, Saturday morning works.")

        self.assertEqual(services.unread_count(self.tasker), 1)
        self.assertEqual(services.unread_count(self.customer), 1)
        self.assertEqual(services.list_conversations(self.tasker)[0].unread_count, 1)

        self.assertEqual(services.mark_conversation_read(self.tasker, dto.id), 1)
        self.assertEqual(services.unread_count(self.tasker), 0)
        self.assertEqual(services.unread_count(self.customer), 1)

    def test_messages_in_order(self):
        dto = self.start()
        services.send_message(self.tasker, dto.id, "Yes.")
        services.send_message(self.customer, dto.id, "Great, see you then.")
        page = services.get_messages(self.customer, dto.id, limit=2)
        self.assertEqual([m.content for m in page.messages], [HELLO, "Yes."])
        self.assertEqual(page.total, 3)
        self.assertTrue(page.has_more)

    def test_outsider_gets_not_found(self):
        dto = self.start()
        outsider = make_user()
        with self.assertRaises(NotFoundError):
            services.get_messages(outsider, dto.id)
        with self.assertRaises(NotFoundError):
            services.send_message(outsider, dto.id, "Let me in")

    def test_content_bounds(self):
        dto = self.start()
        with self.assertRaises(ValidationFailed):
            services.send_message(self.customer, dto.id, "   ")
        with self.assertRaises(ValidationFailed):
            services.send_message(self.customer, dto.id, "x" * 5001)


class MessagingAPITest(TestCase):

    def test_conversation_flow(self):
        customer = make_user()
        tasker = make_user(role=UserRole.TASKER)
        client = Client()
        client.force_login(customer)

        response = client.post(
            '/api/messages/conversations',
            data=json.dumps({'recipient_id': str(tasker.id), 'initial_message': HELLO}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 201)
        conversation_id = response.json()['id']

        tasker_client = Client()
        tasker_client.force_login(tasker)
        self.assertEqual(tasker_client.get('/api/messages/unread-count').json()['count'], 1)

        response = tasker_client.post(
            f'/api/messages/conversations/{conversation_id}/messages',
            data=json.dumps({'content': 'Sure, what time?'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 201)

        response = tasker_client.post(f'/api/messages/conversations/{conversation_id}/read')
        self.assertEqual(response.json()['count'], 1)

        listing = client.get(f'/api/messages/conversations/{conversation_id}/messages')
        self.assertEqual(listing.json()['total'], 2)

    def test_requires_login(self):
        self.assertEqual(Client().get('/api/messages/conversations').status_code, 401)
