import tempfile
from datetime import date

from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import IntegrityError
from django.test import TestCase, override_settings

from academics.models import Department, Level
from core.choices import Gender, PromotionStatus
from core.models import AcademicYear
from students.models import Enrollment, Student


class StudentModelTests(TestCase):
    """Tests for the Student model."""

    def setUp(self):
        self.department = Department.objects.create(name='Electrical Engineering', abbreviation='EEC')
        self.level = Level.objects.create(name='Level 1', number=1)
        self.year = AcademicYear.objects.create(
            label='2024/2025', start_date=date(2024, 9, 1), end_date=date(2025, 7, 31)
        )
        self.next_year = AcademicYear.objects.create(
            label='2025/2026', start_date=date(2025, 9, 1), end_date=date(2026, 7, 31)
        )
        self.student = Student.objects.create(
            name='Alice Ngwa',
            matricule='GT001',
            gender=Gender.FEMALE,
            department=self.department,
        )

    def test_str_with_matricule(self):
        self.assertEqual(str(self.student), 'Alice Ngwa (GT001)')

    def test_str_without_matricule(self):
        student = Student.objects.create(name='Bob Tabe', gender=Gender.MALE)
        self.assertEqual(str(student), 'Bob Tabe')

    def test_photo_as_data_uri_without_photo(self):
        self.assertIsNone(self.student.photo_as_data_uri())

    @override_settings(MEDIA_ROOT=tempfile.mkdtemp())
    def test_photo_as_data_uri(self):
        """Test the photo is embedded as a base64 data URI."""
        self.student.photo = SimpleUploadedFile('alice.png', b'fake-image-bytes', content_type='image/png')
        self.student.save()

        data_uri = self.student.photo_as_data_uri()
        self.assertTrue(data_uri.startswith('data:image/png;base64,'))

    def test_get_enrollment(self):
        enrollment = Enrollment.objects.create(
            student=self.student, academic_year=self.year, level=self.level
        )
        self.assertEqual(self.student.get_enrollment(self.year), enrollment)
        self.assertIsNone(self.student.get_enrollment(self.next_year))

    def test_enrollment_defaults(self):
        enrollment = Enrollment.objects.create(
            student=self.student, academic_year=self.year, level=self.level
        )
        self.assertFalse(enrollment.is_repeater)
        self.assertIsNone(enrollment.promoted)
        self.assertEqual(enrollment.promotion_status, PromotionStatus.PENDING)

    def test_one_enrollment_per_year(self):
        """Test a student cannot be enrolled twice in the same year."""
        Enrollment.objects.create(student=self.student, academic_year=self.year, level=self.level)
        with self.assertRaises(IntegrityError):
            Enrollment.objects.create(student=self.student, academic_year=self.year, level=self.level)
