"""
Tests for message catalogs, domain errors, uploads, queued email and scheduled sweeps.
"""
import json
from datetime import timedelta
from unittest import mock
from uuid import uuid4

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import IntegrityError, OperationalError
from django.test import RequestFactory, TestCase
from django.utils import timezone

from apps.core import i18n
from apps.core.email_service import queue_email, send_email
from apps.core.errors import (
    ConflictError,
    NotFoundError,
    ServiceError,
    ValidationFailed,
    translate_database_error,
)
from apps.core.task_service import TaskService
from apps.core.uploads import DOCUMENT_TYPES, MB, validate_upload
from apps.realtime.models import Channel, EventAction, RealtimeEvent
from apps.realtime.services import publish

User = get_user_model()


class TranslateTest(TestCase):

    def test_locale_lookup(self):
        self.assertEqual(i18n.translate("errors.duplicate", "fr"), "Cet enregistrement existe déjà.")
        self.assertEqual(i18n.translate("errors.duplicate", "de-DE"), "Dieser Eintrag existiert bereits.")

    def test_falls_back_to_english_then_key(self):
        self.assertEqual(
            i18n.translate("emails.contactReceived.subject", "de", subject="Hello"),
            "New contact message: Hello",
        )
        self.assertEqual(i18n.translate("nothing.here", "ar"), "nothing.here")

    def test_missing_params_kept(self):
        self.assertEqual(
            i18n.translate("uploads.fileTooLarge", "en"),
            "File too large. Maximum size is {max_mb} MB",
        )

    def test_normalize_locale(self):
        self.assertEqual(i18n.normalize_locale("AR_ma"), "ar")
        self.assertEqual(i18n.normalize_locale("es"), "fr")
        self.assertEqual(i18n.normalize_locale(None, fallback="en"), "en")

    def test_resolve_locale_from_header(self):
        request = RequestFactory().get('/', HTTP_ACCEPT_LANGUAGE='de-DE,de;q=0.9')
        self.assertEqual(i18n.resolve_locale(request), "de")


class ErrorTest(TestCase):

    def test_localized_message(self):
        error = NotFoundError("bookings.notFound")
        self.assertEqual(str(error), "Booking not found")
        self.assertEqual(error.status_code, 404)
        self.assertIsInstance(error, ValueError)

    def test_params_render_into_message(self):
        error = ValidationFailed("auth.invalidLanguage", code="es")
        self.assertEqual(str(error), "Unsupported language: es")
        self.assertEqual(error.localized("fr"), "Langue non prise en charge : es")

    def test_locale_param_is_reserved(self):
        with self.assertRaises(TypeError):
            ValidationFailed("auth.invalidLanguage", locale="es")

    def test_unique_violation_maps_to_conflict(self):
        error = translate_database_error(IntegrityError("UNIQUE constraint failed: users.email"))
        self.assertIsInstance(error, ConflictError)
        self.assertEqual(error.message_key, "errors.duplicate")

    def test_unknown_database_error(self):
        error = translate_database_error(OperationalError("disk I/O error"))
        self.assertIsInstance(error, ServiceError)
        self.assertEqual(error.status_code, 500)
        self.assertEqual(error.code, "database_error")


class UploadValidationTest(TestCase):

    def test_accepts_pdf(self):
        validate_upload(
            SimpleUploadedFile("id.pdf", b"%PDF-1.4", content_type="application/pdf"),
            DOCUMENT_TYPES, MB,
        )

    def test_rejects_type_and_size(self):
        with self.assertRaises(ValidationFailed) as ctx:
            validate_upload(
                SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain"),
                DOCUMENT_TYPES, MB,
            )
        self.assertEqual(ctx.exception.message_key, "uploads.invalidFileType")

        with self.assertRaises(ValidationFailed) as ctx:
            validate_upload(
                SimpleUploadedFile("big.pdf", b"x" * (MB + 1), content_type="application/pdf"),
                DOCUMENT_TYPES, MB,
            )
        self.assertEqual(ctx.exception.message_key, "uploads.fileTooLarge")


class EmailTest(TestCase):

    def test_send_renders_catalog(self):
        self.assertTrue(send_email(
            "support@test.com", "contactReceived", "en",
            name="Amina", email="amina@test.com", subject="Billing", message="Where is my invoice?",
        ))
        self.assertEqual(mail.outbox[0].subject, "New contact message: Billing")
        self.assertIn("Where is my invoice?", mail.outbox[0].body)

    def test_no_recipients(self):
        self.assertFalse(send_email([""], "contactReceived", "en"))
        self.assertEqual(len(mail.outbox), 0)

    def test_queue_runs_locally(self):
        task_id = queue_email(["a@test.com", "b@test.com"], "contactReceived", "fr", subject="Hi")
        self.assertIsNotNone(task_id)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["a@test.com", "b@test.com"])


class ScheduledTaskTest(TestCase):

    def test_facade_runs_sweep_locally(self):
        user = User.objects.create_user(email="events@test.com", password="Testpass123")
        old = publish([user.id], Channel.JOBS, EventAction.INSERT, uuid4())[0]
        RealtimeEvent.objects.filter(id=old.id).update(created_at=timezone.now() - timedelta(hours=48))

        self.assertIsNotNone(TaskService.prune_realtime_events())
        self.assertFalse(RealtimeEvent.objects.filter(id=old.id).exists())

    def test_scheduled_handler_queues_through_facade(self):
        from lambda_handlers import scheduled_expire_bookings

        with mock.patch.object(TaskService, 'expire_stale_bookings', return_value="task-1") as queued:
            response = scheduled_expire_bookings({}, None)
        queued.assert_called_once_with()
        self.assertEqual(
            json.loads(response['body']),
            {'task': 'expire_stale_bookings', 'task_id': 'task-1'},
        )
