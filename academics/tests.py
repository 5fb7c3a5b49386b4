from datetime import date

from django.db import IntegrityError
from django.test import TestCase

from academics.models import Class, Course, Department, Level
from core.models import AcademicYear


class DepartmentModelTests(TestCase):

    def test_display_code_prefers_abbreviation(self):
        department = Department.objects.create(name='Electrical Engineering', abbreviation='EEC')
        self.assertEqual(department.display_code, 'EEC')

    def test_display_code_falls_back_to_name(self):
        department = Department.objects.create(name='Electronics')
        self.assertEqual(department.display_code, 'Electronics')


class LevelModelTests(TestCase):
    """Tests for level ordering and promotion targets."""

    def setUp(self):
        self.level1 = Level.objects.create(name='Level 1', number=1)
        self.level2 = Level.objects.create(name='Level 2', number=2)

    def test_get_next_level(self):
        self.assertEqual(self.level1.get_next_level(), self.level2)

    def test_final_level_has_no_next(self):
        self.assertIsNone(self.level2.get_next_level())

    def test_ordered_by_number(self):
        Level.objects.create(name='Level 0', number=0)
        self.assertEqual(list(Level.objects.values_list('number', flat=True)), [0, 1, 2])


class ClassAndCourseTests(TestCase):

    def setUp(self):
        self.year = AcademicYear.objects.create(
            label='2024/2025', start_date=date(2024, 9, 1), end_date=date(2025, 7, 31)
        )
        self.department = Department.objects.create(name='Electrical Engineering', abbreviation='EEC')
        self.level = Level.objects.create(name='Level 1', number=1)

    def test_class_str(self):
        group = Class.objects.create(
            name='EEC 1A', academic_year=self.year, department=self.department, level=self.level
        )
        self.assertEqual(str(group), 'EEC 1A (2024/2025)')

    def test_class_name_unique_per_year(self):
        Class.objects.create(name='EEC 1A', academic_year=self.year, department=self.department)
        with self.assertRaises(IntegrityError):
            Class.objects.create(name='EEC 1A', academic_year=self.year, department=self.department)

    def test_course_defaults(self):
        course = Course.objects.create(name='Mathematics', code='MAT101', level=self.level)
        self.assertEqual(course.coefficient, 1)
        self.assertEqual(str(course), 'MAT101 - Mathematics')
