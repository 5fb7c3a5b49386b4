from django.test import TestCase, override_settings
from django.contrib.auth import get_user_model

User = get_user_model()


class UserManagerTests(TestCase):
    """Tests for the custom UserManager."""

    def test_create_user(self):
        """Test creating a regular user with email."""
        user = User.objects.create_user(
            email='test@example.com',
            password='testpass123'
        )
        self.assertEqual(user.email, 'test@example.com')
        self.assertTrue(user.check_password('testpass123'))
        self.assertFalse(user.is_staff)
        self.assertFalse(user.is_superuser)
        self.assertTrue(user.is_active)

    def test_create_user_without_email_raises_error(self):
        """Test that creating a user without email raises ValueError."""
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='testpass123')

    def test_create_user_normalizes_email(self):
        """Test that email is normalized (lowercase domain)."""
        user = User.objects.create_user(
            email='test@EXAMPLE.COM',
            password='testpass123'
        )
        self.assertEqual(user.email, 'test@example.com')

    def test_create_superuser(self):
        """Test creating a superuser."""
        user = User.objects.create_superuser(
            email='admin@example.com',
            password='adminpass123'
        )
        self.assertTrue(user.is_staff)
        self.assertTrue(user.is_superuser)
        self.assertTrue(user.is_active)
        self.assertEqual(user.role_label, 'Super Admin')

    def test_create_superuser_without_is_staff_raises_error(self):
        """Test that superuser must have is_staff=True."""
        with self.assertRaises(ValueError):
            User.objects.create_superuser(
                email='admin@example.com',
                password='adminpass123',
                is_staff=False
            )

    def test_create_superuser_without_is_superuser_raises_error(self):
        """Test that superuser must have is_superuser=True."""
        with self.assertRaises(ValueError):
            User.objects.create_superuser(
                email='admin@example.com',
                password='adminpass123',
                is_superuser=False
            )

    def test_create_school_admin(self):
        """Test creating a school admin with admin site access."""
        user = User.objects.create_school_admin(
            email='principal@gtttc.cm',
            password='schoolpass123'
        )
        self.assertTrue(user.is_school_admin)
        self.assertTrue(user.is_staff)
        self.assertFalse(user.is_lecturer)
        self.assertEqual(user.role_label, 'School Admin')

    def test_create_lecturer(self):
        """Test creating a lecturer."""
        user = User.objects.create_lecturer(
            email='lecturer@gtttc.cm',
            password='lecturerpass123'
        )
        self.assertTrue(user.is_lecturer)
        self.assertFalse(user.is_school_admin)
        self.assertFalse(user.is_staff)
        self.assertEqual(user.role_label, 'Lecturer')

    def test_str_is_email(self):
        """Test string representation."""
        user = User.objects.create_user(email='plain@gtttc.cm', password='testpass123')
        self.assertEqual(str(user), 'plain@gtttc.cm')
        self.assertEqual(user.role_label, 'User')


@override_settings(STORAGES={
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
})
class AdminSiteTests(TestCase):
    """Tests for the Unfold admin screens."""

    def setUp(self):
        self.superuser = User.objects.create_superuser(email='root@gtttc.cm', password='adminpass123')
        self.client.force_login(self.superuser)

    def test_user_changelist(self):
        response = self.client.get('/admin/accounts/user/')
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'root@gtttc.cm')

    def test_record_changelists(self):
        """Test every record screen loads."""
        for path in (
            '/admin/core/academicyear/',
            '/admin/core/term/',
            '/admin/academics/department/',
            '/admin/academics/level/',
            '/admin/academics/class/',
            '/admin/academics/course/',
            '/admin/lecturers/lecturer/',
            '/admin/students/student/',
            '/admin/students/enrollment/',
            '/admin/gradebook/mark/',
            '/admin/gradebook/disciplinerecord/',
        ):
            with self.subTest(path=path):
                self.assertEqual(self.client.get(path).status_code, 200)
