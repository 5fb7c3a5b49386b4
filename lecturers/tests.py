import json

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from academics.models import Department, Level

from .models import Lecturer
from .services import create_lecturer_account

User = get_user_model()


class LecturerModelTests(TestCase):
    """Tests for the Lecturer model."""

    def setUp(self):
        self.department = Department.objects.create(name='Electrical Engineering', abbreviation='EEC')
        self.level = Level.objects.create(name='Level 1', number=1)

    def test_class_master_needs_department_and_level(self):
        """Test a class master without a level fails validation."""
        lecturer = Lecturer(full_name='Paul Ndip', is_class_master=True, department=self.department)
        with self.assertRaises(ValidationError):
            lecturer.clean()

    def test_class_master_name(self):
        Lecturer.objects.create(
            full_name='Paul Ndip', is_class_master=True,
            department=self.department, level=self.level,
        )
        self.assertEqual(Lecturer.class_master_name(self.department.pk, self.level.pk), 'Paul Ndip')

    def test_class_master_name_missing(self):
        """Test N/A when no class master is assigned."""
        Lecturer.objects.create(full_name='Mary Ayuk', department=self.department, level=self.level)
        self.assertEqual(Lecturer.class_master_name(self.department.pk, self.level.pk), 'N/A')
        self.assertEqual(Lecturer.class_master_name(None, self.level.pk), 'N/A')


class CreateLecturerAccountTests(TestCase):
    """Tests for create_lecturer_account."""

    def test_creates_user_and_profile(self):
        lecturer = create_lecturer_account('Paul Ndip Tabi', 'paul@gtttc.cm', 'secret123', phone='677000000')

        self.assertTrue(lecturer.user.is_lecturer)
        self.assertFalse(lecturer.user.is_school_admin)
        self.assertTrue(lecturer.user.check_password('secret123'))
        self.assertEqual(lecturer.user.first_name, 'Paul')
        self.assertEqual(lecturer.user.last_name, 'Ndip Tabi')
        self.assertEqual(lecturer.email, 'paul@gtttc.cm')
        self.assertEqual(lecturer.phone, '677000000')

    def test_short_name_rejected(self):
        with self.assertRaises(ValidationError):
            create_lecturer_account('A', 'a@gtttc.cm', 'secret123')
        self.assertFalse(User.objects.filter(email='a@gtttc.cm').exists())

    def test_duplicate_email_rejected(self):
        """Test an existing email, in any case, is refused."""
        User.objects.create_user(email='paul@gtttc.cm', password='secret123')
        with self.assertRaises(ValidationError):
            create_lecturer_account('Paul Ndip', 'Paul@gtttc.cm', 'secret123')
        self.assertEqual(Lecturer.objects.count(), 0)


class CreateAccountViewTests(TestCase):
    """Tests for the create-account endpoint."""

    def setUp(self):
        self.admin = User.objects.create_school_admin(email='admin@gtttc.cm', password='testpass123')
        self.client.force_login(self.admin)
        self.url = reverse('lecturers:create_account')
        self.payload = {
            'full_name': 'Paul Ndip',
            'email': 'paul@gtttc.cm',
            'password': 'secret123',
            'role': 'lecturer',
        }

    def post_json(self, payload):
        return self.client.post(self.url, data=json.dumps(payload), content_type='application/json')

    def test_admin_creates_account(self):
        response = self.post_json(self.payload)

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['user']['email'], 'paul@gtttc.cm')
        self.assertEqual(body['user']['role'], 'Lecturer')
        self.assertEqual(body['lecturer']['full_name'], 'Paul Ndip')
        self.assertTrue(Lecturer.objects.filter(pk=body['lecturer']['id']).exists())

    def test_camel_case_keys_accepted(self):
        payload = dict(self.payload)
        payload['fullName'] = payload.pop('full_name')
        response = self.post_json(payload)
        self.assertEqual(response.status_code, 201)

    def test_missing_fields(self):
        response = self.post_json({'email': 'paul@gtttc.cm'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Missing required fields: full_name, email, password, role')

    def test_wrong_role_rejected(self):
        response = self.post_json(dict(self.payload, role='teacher'))
        self.assertEqual(response.status_code, 400)
        self.assertIn('lecturer', response.json()['error'])
        self.assertFalse(User.objects.filter(email='paul@gtttc.cm').exists())

    def test_short_name_rejected(self):
        response = self.post_json(dict(self.payload, full_name='A'))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Full name must be at least 2 characters')

    def test_duplicate_email(self):
        self.post_json(self.payload)
        response = self.post_json(dict(self.payload, full_name='Paul Other'))
        self.assertEqual(response.status_code, 400)
        self.assertIn('already exists', response.json()['error'])

    def test_lecturer_forbidden(self):
        """Test only school admins can create accounts."""
        lecturer = User.objects.create_lecturer(email='lecturer@gtttc.cm', password='testpass123')
        self.client.force_login(lecturer)
        response = self.post_json(self.payload)
        self.assertEqual(response.status_code, 403)

    def test_anonymous_unauthorized(self):
        self.client.logout()
        response = self.post_json(self.payload)
        self.assertEqual(response.status_code, 401)
