import json
from datetime import date
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase, override_settings
from django.urls import reverse

from academics.models import Class, Course, Department, Level
from core.choices import Gender, PromotionStatus, TermLabel
from core.models import AcademicYear, Term
from lecturers.models import Lecturer
from students.models import Enrollment, Student

from .exports import (
    XLSX_CONTENT_TYPE, build_report_card_workbook,
    build_summary_statistics_workbook, workbook_response_bytes,
)
from .forms import PromotionRequestForm, ReportCardRequestForm, StatisticsRequestForm
from .grading import (
    department_score, evaluate_scores, grade_for_average, is_pass, percentage,
    remark_for_average, round_half_up, subject_average, weighted_average,
    weighted_exam_score,
)
from .marks import course_mark_sheet, student_average, student_position
from .models import DisciplineRecord, Mark
from .promotions import calculate_annual_averages, check_repeaters, promote_students
from .report_cards import ReportCardGenerator, generate_report_cards
from .statistics import compute_statistics, fetch_marks


User = get_user_model()


class GradebookFixtureMixin:
    """
    One department and level with three students and two courses.

    First term averages (CA + exam) / 2:
        Alice  Mathematics 18.5, Physics 16.5  -> term average 17.3
        Bob    Mathematics 12.0, Physics 11.99 -> term average 11.99
        Carl   Mathematics  7.0, Physics  5.0  -> term average 5.8
    """

    def setUp(self):
        self.year = AcademicYear.objects.create(
            label='2024/2025', start_date=date(2024, 9, 1), end_date=date(2025, 7, 31)
        )
        self.next_year = AcademicYear.objects.create(
            label='2025/2026', start_date=date(2025, 9, 1), end_date=date(2026, 7, 31)
        )
        self.first_term = Term.objects.create(
            label=TermLabel.FIRST, start_date=date(2024, 9, 1), end_date=date(2024, 12, 15)
        )
        self.second_term = Term.objects.create(
            label=TermLabel.SECOND, start_date=date(2025, 1, 5), end_date=date(2025, 3, 30)
        )
        self.third_term = Term.objects.create(
            label=TermLabel.THIRD, start_date=date(2025, 4, 10), end_date=date(2025, 7, 31)
        )

        self.eec = Department.objects.create(name='Electrical Engineering', abbreviation='EEC')
        self.elt = Department.objects.create(name='Electronics', abbreviation='ELT')
        self.level1 = Level.objects.create(name='Level 1', number=1)
        self.level2 = Level.objects.create(name='Level 2', number=2)

        self.math = Course.objects.create(name='Mathematics', code='MAT101', coefficient=2, level=self.level1)
        self.physics = Course.objects.create(name='Physics', code='PHY101', coefficient=3, level=self.level1)

        self.alice = self.make_student('Alice Ngwa', 'GT001', Gender.FEMALE)
        self.bob = self.make_student('Bob Tabe', 'GT002', Gender.MALE)
        self.carl = self.make_student('Carl Eta', 'GT003', Gender.MALE)

        self.add_marks(self.alice, self.first_term, ('18', '19'), ('16', '17'))
        self.add_marks(self.bob, self.first_term, ('12', '12'), ('11', '12.98'))
        self.add_marks(self.carl, self.first_term, ('6', '8'), ('4', '6'))

    def make_student(self, name, matricule, gender, department=None, level=None, year=None):
        student = Student.objects.create(
            name=name,
            matricule=matricule,
            gender=gender,
            date_of_birth=date(2004, 5, 17),
            place_of_birth='Kumba',
            department=department or self.eec,
        )
        Enrollment.objects.create(
            student=student,
            academic_year=year or self.year,
            level=level or self.level1,
        )
        return student

    def add_marks(self, student, term, math_scores, physics_scores, year=None):
        for course, (ca, exam) in ((self.math, math_scores), (self.physics, physics_scores)):
            Mark.objects.create(
                student=student,
                course=course,
                term=term,
                academic_year=year or self.year,
                ca_score=Decimal(ca),
                exam_score=Decimal(exam),
            )


# ============ Grading rules ============

class GradingRulesTest(TestCase):
    """Tests for grade, remark and average rules."""

    def test_grade_boundaries(self):
        """Test grade thresholds are inclusive lower bounds."""
        self.assertEqual(grade_for_average(18.5), 'A')
        self.assertEqual(grade_for_average(18.49), 'B')
        self.assertEqual(grade_for_average(16.5), 'B')
        self.assertEqual(grade_for_average(15.5), 'C')
        self.assertEqual(grade_for_average(13.5), 'D')
        self.assertEqual(grade_for_average(12.0), 'E')
        self.assertEqual(grade_for_average(11.99), 'F')
        self.assertIsNone(grade_for_average(None))

    def test_remark_boundaries(self):
        """Test remark thresholds."""
        self.assertEqual(remark_for_average(18.5), 'Excellent')
        self.assertEqual(remark_for_average(16.5), 'Very Good')
        self.assertEqual(remark_for_average(14.5), 'Good')
        self.assertEqual(remark_for_average(13.5), 'Fair')
        self.assertEqual(remark_for_average(12), 'Average')
        self.assertEqual(remark_for_average(10), 'Below Avg')
        self.assertEqual(remark_for_average(8), 'Poor')
        self.assertEqual(remark_for_average(6), 'Very Poor')
        self.assertEqual(remark_for_average(5.99), 'Weak')

    def test_report_card_and_statistics_formulas_differ(self):
        """Test the plain mean and the 40/60 weighting."""
        self.assertEqual(subject_average(10, 16), 13.0)
        self.assertAlmostEqual(weighted_exam_score(10, 16), 13.6)
        self.assertEqual(subject_average(None, 14), 7.0)

    def test_weighted_average(self):
        """Test coefficient weighting and totals."""
        average, total_weighted, total_coef = weighted_average([(18.5, 2), (16.5, 3)])
        self.assertAlmostEqual(average, 17.3)
        self.assertAlmostEqual(total_weighted, 86.5)
        self.assertEqual(total_coef, 5)

    def test_weighted_average_without_coefficients_is_zero(self):
        """Test a zero total coefficient gives a zero average."""
        self.assertEqual(weighted_average([]), (0, 0.0, 0))
        self.assertEqual(weighted_average([(15, 0)])[0], 0)

    def test_is_pass(self):
        """Test the pass mark."""
        self.assertTrue(is_pass(12))
        self.assertFalse(is_pass(11.99))
        self.assertFalse(is_pass(None))

    @override_settings(GRADEBOOK_PASS_MARK=10)
    def test_pass_mark_override(self):
        """Test GRADEBOOK_ settings override the defaults."""
        self.assertTrue(is_pass(10))

    def test_department_score(self):
        """Test 65% pass rate and 35% performance weighting."""
        self.assertAlmostEqual(department_score(100, 16), 93.0)
        self.assertAlmostEqual(department_score(50, 17), 62.25)
        self.assertEqual(department_score(0, 0), 0)
        # 80% pass rate, average 14 out of 20
        self.assertEqual(department_score(80, 14), 76.5)

    def test_round_half_up(self):
        """Test ties round away from zero instead of to the even digit."""
        self.assertEqual(round_half_up(11.125), 11.13)
        self.assertEqual(round_half_up(2.675), 2.68)
        self.assertEqual(round_half_up(12.5, 0), 13)
        self.assertEqual(round_half_up(11.994), 11.99)

    def test_percentage_rounds_half_up(self):
        self.assertEqual(percentage(1, 8, digits=0), 13)
        self.assertEqual(percentage(1, 3), 33.3)
        self.assertEqual(percentage(5, 0), 0)

    def test_evaluate_scores_uses_other_score_when_one_missing(self):
        """Test mark entry evaluation with a missing component."""
        result = evaluate_scores(None, 14, 2)
        self.assertEqual(result['average'], 14.0)
        self.assertEqual(result['weighted'], 28.0)
        self.assertEqual(result['grade'], 'D')
        self.assertEqual(result['remark'], 'Fair')

        result = evaluate_scores(12, 11.99, 1)
        self.assertEqual(result['grade'], 'F')
        self.assertEqual(result['remark'], 'Fail')

    def test_evaluate_scores_without_scores(self):
        """Test no scores gives no grade."""
        self.assertEqual(
            evaluate_scores(None, None, 3),
            {'average': None, 'weighted': None, 'grade': None, 'remark': None},
        )


class MarkModelTest(GradebookFixtureMixin, TestCase):
    """Tests for the Mark and DisciplineRecord models."""

    def test_score_properties_default_to_zero(self):
        """Test ca and exam properties treat missing scores as 0."""
        mark = Mark(ca_score=None, exam_score=Decimal('14.50'))
        self.assertEqual(mark.ca, 0.0)
        self.assertEqual(mark.exam, 14.5)

    def test_score_validation(self):
        """Test scores above 20 are rejected by full_clean."""
        from django.core.exceptions import ValidationError
        mark = Mark(
            student=self.alice, course=self.math, term=self.second_term,
            academic_year=self.year, ca_score=Decimal('21'), exam_score=Decimal('10'),
        )
        with self.assertRaises(ValidationError):
            mark.full_clean()

    def test_discipline_snapshot(self):
        """Test the report card discipline block is made of strings."""
        record = DisciplineRecord.objects.create(
            student=self.alice, term=self.first_term, academic_year=self.year,
            justified_absences=4, unjustified_absences=2, lateness=1,
            warnings=['Late to class', 'Uniform'],
        )
        snapshot = record.as_report_snapshot()
        self.assertEqual(snapshot['justified_abs'], '4')
        self.assertEqual(snapshot['unjustified_abs'], '2')
        self.assertEqual(snapshot['warning'], '2')
        self.assertEqual(snapshot['conduct'], 'Good')

    def test_default_discipline_snapshot(self):
        """Test defaults when no record exists."""
        snapshot = DisciplineRecord.default_snapshot()
        self.assertEqual(snapshot['late'], '0')
        self.assertEqual(snapshot['warning'], '0')
        self.assertEqual(snapshot['conduct'], 'Good')


# ============ Report cards ============

class ReportCardGeneratorTest(GradebookFixtureMixin, TestCase):
    """Tests for report card generation."""

    def test_bulk_cards_ranked_by_term_average(self):
        """Test cards are sorted and ranked by position."""
        cards, summary = generate_report_cards(self.first_term, self.year)

        self.assertEqual([card['student_name'] for card in cards], ['Alice Ngwa', 'Bob Tabe', 'Carl Eta'])
        self.assertEqual([card['performance']['class_postion'] for card in cards], ['1', '2', '3'])
        self.assertEqual(cards[0]['performance']['term_average'], 17.3)
        self.assertEqual(cards[1]['performance']['term_average'], 11.99)
        self.assertEqual(cards[2]['performance']['term_average'], 5.8)

        self.assertEqual(summary['total_students'], 3)
        self.assertEqual(summary['students_passed'], 1)
        self.assertEqual(summary['pass_rate'], 33)
        self.assertEqual(summary['class_average'], 11.7)
        self.assertEqual(summary['skipped_students'], [])

        profile = cards[0]['class_profile']
        self.assertEqual(profile['min_max'], '5.80 - 17.30')
        self.assertEqual(profile['num_enrolled'], 3)
        self.assertEqual(profile['num_passed'], 1)

    def test_term_average_rounds_half_up(self):
        """Test an average of 11.125 is reported as 11.13."""
        dan = self.make_student('Dan Fon', 'GT004', Gender.MALE)
        self.add_marks(dan, self.first_term, ('11', '11.25'), ('11', '11.25'))

        cards, _ = generate_report_cards(self.first_term, self.year, student_id=dan.pk)

        self.assertEqual(cards[0]['performance']['term_average'], 11.13)

    def test_pass_rate_rounds_half_up(self):
        """Test one pass out of eight students gives 13%."""
        for n in range(5):
            student = self.make_student(f'Weak Student {n}', f'GTW0{n}', Gender.MALE)
            self.add_marks(student, self.first_term, ('5', '5'), ('4', '6'))

        _, summary = generate_report_cards(self.first_term, self.year)

        self.assertEqual(summary['total_students'], 8)
        self.assertEqual(summary['students_passed'], 1)
        self.assertEqual(summary['pass_rate'], 13)

    def test_card_fields(self):
        """Test the student and subject fields of a card."""
        cards, _ = generate_report_cards(self.first_term, self.year, student_id=self.alice.pk)
        card = cards[0]

        self.assertEqual(card['academic_year'], '2024/2025')
        self.assertEqual(card['term'], 'First')
        self.assertEqual(card['student_id'], 'GT001')
        self.assertEqual(card['dob'], '2004-05-17')
        self.assertEqual(card['pob'], 'Kumba')
        self.assertEqual(card['department'], 'EEC')
        self.assertEqual(card['level'], 'Level 1')
        self.assertEqual(card['repeater'], 'No')
        self.assertEqual(card['num_subjects'], 2)
        self.assertEqual(card['num_passed'], 2)
        self.assertEqual(card['class_master'], 'N/A')
        self.assertIsNone(card['student_photo_base64'])

        math = card['subjects'][0]
        self.assertEqual(math['subject'], 'Mathematics')
        self.assertEqual(math['competencies'], 'N/A')
        self.assertEqual(math['average'], 18.5)
        self.assertEqual(math['weighted_average'], 37.0)
        self.assertEqual(math['grade'], 'A')
        self.assertEqual(math['remark_on_average'], 'Excellent')
        self.assertEqual(math['min_max_average'], '7.0 - 18.5')

        physics = card['subjects'][1]
        self.assertEqual(physics['grade'], 'B')
        self.assertEqual(physics['min_max_average'], '5.0 - 16.5')

        self.assertEqual(card['performance']['total_coef'], 5)
        self.assertAlmostEqual(card['performance']['total_weighted_score'], 86.5)
        self.assertEqual(card['performance']['performance_remark'], 'Very Good')

    def test_grade_at_pass_mark_boundary(self):
        """Test an exact 12.0 average is graded E and 11.99 is F."""
        cards, _ = generate_report_cards(self.first_term, self.year, student_id=self.bob.pk)
        grades = {subject['subject']: subject['grade'] for subject in cards[0]['subjects']}
        self.assertEqual(grades, {'Mathematics': 'E', 'Physics': 'F'})

    def test_single_student_rank_among_classmates(self):
        """Test a single card is ranked against classmates' averages."""
        cards, summary = generate_report_cards(self.first_term, self.year, student_id=self.bob.pk)
        card = cards[0]
        self.assertEqual(card['performance']['class_postion'], '2')
        self.assertEqual(card['class_profile']['num_enrolled'], 3)
        self.assertEqual(card['class_profile']['num_passed'], 1)
        self.assertEqual(card['class_profile']['min_max'], '5.80 - 17.30')
        self.assertEqual(summary['total_students'], 1)
        self.assertEqual(summary['students_passed'], 0)
        self.assertEqual(summary['pass_rate'], 0)

    def test_tied_students_share_rank(self):
        """Test rank counts only strictly greater averages."""
        dora = self.make_student('Dora Mbah', 'GT004', Gender.FEMALE)
        self.add_marks(dora, self.first_term, ('18', '19'), ('16', '17'))

        alice_card = generate_report_cards(self.first_term, self.year, student_id=self.alice.pk)[0][0]
        dora_card = generate_report_cards(self.first_term, self.year, student_id=dora.pk)[0][0]
        self.assertEqual(alice_card['performance']['class_postion'], '1')
        self.assertEqual(dora_card['performance']['class_postion'], '1')

    def test_classmates_limited_to_department(self):
        """Test single student ranking ignores other departments."""
        self.make_student('Eve Ako', 'GT005', Gender.FEMALE, department=self.elt)
        eve = Student.objects.get(matricule='GT005')
        self.add_marks(eve, self.first_term, ('20', '20'), ('20', '20'))

        card = generate_report_cards(self.first_term, self.year, student_id=self.alice.pk)[0][0]
        self.assertEqual(card['performance']['class_postion'], '1')
        self.assertEqual(card['class_profile']['num_enrolled'], 3)

    def test_unknown_student_raises(self):
        """Test a student not enrolled in the year is rejected."""
        outsider = self.make_student('Fred Ayuk', 'GT006', Gender.MALE, year=self.next_year)
        with self.assertRaises(Student.DoesNotExist):
            generate_report_cards(self.first_term, self.year, student_id=outsider.pk)

    def test_department_and_level_filters(self):
        """Test bulk filters narrow the selected students."""
        self.make_student('Eve Ako', 'GT005', Gender.FEMALE, department=self.elt)
        cards, summary = generate_report_cards(self.first_term, self.year, department_id=self.elt.pk)
        self.assertEqual([card['student_name'] for card in cards], ['Eve Ako'])
        self.assertEqual(cards[0]['num_subjects'], 0)
        self.assertEqual(cards[0]['performance']['term_average'], 0)

        cards, _ = generate_report_cards(self.first_term, self.year, level_id=self.level2.pk)
        self.assertEqual(cards, [])

    def test_failed_student_is_skipped_and_listed(self):
        """Test a card that cannot be built is left out of the results."""
        build_card = ReportCardGenerator.build_card
        bob_id = self.bob.pk

        def flaky_build_card(generator, enrollment):
            if enrollment.student_id == bob_id:
                raise ValueError('corrupt mark')
            return build_card(generator, enrollment)

        with patch.object(ReportCardGenerator, 'build_card', autospec=True, side_effect=flaky_build_card):
            with self.assertLogs('gradebook.report_cards', level='ERROR'):
                cards, summary = generate_report_cards(self.first_term, self.year)

        self.assertEqual(len(cards), 2)
        self.assertEqual(summary['skipped_students'], [bob_id])
        self.assertEqual(summary['total_students'], 2)

    def test_third_term_annual_average(self):
        """Test third term cards carry the mean of the term averages."""
        self.add_marks(self.alice, self.third_term, ('14', '14'), ('14', '14'))
        card = generate_report_cards(self.third_term, self.year, student_id=self.alice.pk)[0][0]
        self.assertEqual(card['performance']['term_average'], 14.0)
        self.assertEqual(card['class_profile']['annual_average'], 15.65)
        self.assertEqual(card['class_profile']['annual_num_passed'], 1)

    def test_no_annual_average_before_third_term(self):
        """Test first term cards have no annual average."""
        card = generate_report_cards(self.first_term, self.year, student_id=self.alice.pk)[0][0]
        self.assertEqual(card['class_profile']['annual_average'], 0)
        self.assertEqual(card['class_profile']['annual_num_passed'], 0)

    def test_discipline_and_class_master(self):
        """Test discipline record and class master lookup."""
        DisciplineRecord.objects.create(
            student=self.alice, term=self.first_term, academic_year=self.year,
            unjustified_absences=3, conduct='Excellent', warnings=['Noise'],
        )
        Lecturer.objects.create(
            full_name='Mr Tabi Elias', is_class_master=True,
            department=self.eec, level=self.level1,
        )
        card = generate_report_cards(self.first_term, self.year, student_id=self.alice.pk)[0][0]
        self.assertEqual(card['discipline']['unjustified_abs'], '3')
        self.assertEqual(card['discipline']['conduct'], 'Excellent')
        self.assertEqual(card['discipline']['warning'], '1')
        self.assertEqual(card['class_master'], 'Mr Tabi Elias')

        bob_card = generate_report_cards(self.first_term, self.year, student_id=self.bob.pk)[0][0]
        self.assertEqual(bob_card['discipline'], DisciplineRecord.default_snapshot())

    def test_repeater_info(self):
        """Test repeater and previous level fields."""
        Enrollment.objects.filter(student=self.carl, academic_year=self.year).update(
            is_repeater=True, previous_level=self.level1
        )
        card = generate_report_cards(self.first_term, self.year, student_id=self.carl.pk)[0][0]
        self.assertEqual(card['repeater'], 'Yes')
        self.assertEqual(card['previous_level'], 'Level 1')
        self.assertTrue(card['repeater_info']['is_repeater'])
        self.assertEqual(card['repeater_info']['previous_level_id'], self.level1.pk)

    def test_subject_ranges_computed_once_per_level(self):
        """Test subject ranges are cached for the generator's lifetime."""
        generator = ReportCardGenerator(self.first_term, self.year)
        generator.subject_range(self.math.pk, self.level1.pk)
        with self.assertNumQueries(0):
            self.assertEqual(generator.subject_range(self.physics.pk, self.level1.pk), '5.0 - 16.5')


# ============ Statistics ============

class StatisticsTest(GradebookFixtureMixin, TestCase):
    """
    Tests for the statistics document.

    40/60 scores: Alice 17.4, Bob 12.11, Carl 6.0 (Eve has no marks).
    """

    def setUp(self):
        super().setUp()
        self.eve = self.make_student('Eve Ako', 'GT005', Gender.FEMALE, department=self.elt)

    def test_rankings(self):
        """Test top and bottom students and courses."""
        data, counts = compute_statistics(self.year, 'First')

        self.assertEqual(counts, {'totalStudents': 4, 'totalMarks': 6})
        top = data['top3Students']
        self.assertEqual([s['name'] for s in top], ['Alice Ngwa', 'Bob Tabe', 'Carl Eta'])
        self.assertEqual(top[0]['average'], 17.4)
        self.assertEqual(top[0]['level'], 'Level 1')
        self.assertEqual(top[0]['department'], 'Electrical Engineering')
        self.assertEqual(data['bottom3Students'][-1]['name'], 'Carl Eta')

        self.assertEqual(data['top3Courses'][0]['name'], 'Mathematics')
        self.assertEqual(data['top3Courses'][0]['average'], 12.6)
        self.assertEqual(data['top3Courses'][1]['name'], 'Physics')
        self.assertEqual(data['top3Courses'][1]['average'], 11.33)

    def test_pass_fail_and_enrollment(self):
        """Test pass/fail counts by gender and exam attendance."""
        data, _ = compute_statistics(self.year, 'First')

        passed = data['passFailStats']['passed']
        self.assertEqual((passed['total'], passed['boys'], passed['girls']), (2, 1, 1))
        self.assertEqual(passed['percentageTotal'], 66.7)
        failed = data['passFailStats']['failed']
        self.assertEqual((failed['total'], failed['boys'], failed['girls']), (1, 1, 0))

        enrolled = data['enrollmentStats']['enrolled']
        self.assertEqual((enrolled['total'], enrolled['boys'], enrolled['girls']), (4, 2, 2))
        sat = data['enrollmentStats']['satForExams']
        self.assertEqual(sat['total'], 3)
        self.assertEqual(sat['percentage'], 75.0)

    def test_summary_document(self):
        """Test the summary statistics rows."""
        data, _ = compute_statistics(self.year, 'First')
        document = data['summaryDocument']

        self.assertEqual(document['header']['institutionName'], 'GTTTC KUMBA')
        self.assertEqual(document['header']['level'], 'All Levels')
        physics = next(row for row in document['statistics'] if row['subject'] == 'Physics')
        self.assertEqual(physics['enrollment'], {'boys': 2, 'girls': 1, 'total': 3})
        self.assertEqual(physics['passed']['total'], 2)
        self.assertEqual(physics['passedGte10']['total'], 2)
        self.assertEqual(physics['passedGte10']['girls_percentage'], 100.0)
        self.assertEqual(physics['avgLte5']['total'], 0)
        self.assertEqual(document['summary']['totalCourses'], 2)

    def test_department_performance(self):
        """Test the department comparison is present without a department filter."""
        data, _ = compute_statistics(self.year, 'First')
        performance = data['departmentPerformance']

        self.assertEqual(performance['labels'], ['EEC'])
        details = performance['details'][0]
        self.assertEqual(details['rank'], 1)
        self.assertEqual(details['studentsWhoSat'], 3)
        self.assertEqual(details['passRate'], 66.67)
        self.assertAlmostEqual(details['departmentScore'], 64.05, places=1)

    def test_department_filter_omits_comparison(self):
        """Test a department filter drops departmentPerformance."""
        data, counts = compute_statistics(self.year, 'First', department_id=self.eec.pk)
        self.assertNotIn('departmentPerformance', data)
        self.assertEqual(counts['totalStudents'], 3)
        self.assertEqual(data['summaryDocument']['header']['department'], 'Electrical Engineering')

    def test_class_filter_takes_precedence(self):
        """Test a class filter ignores the level filter."""
        group = Class.objects.create(name='EEC 1A', academic_year=self.year, department=self.eec, level=self.level1)
        Enrollment.objects.filter(student=self.alice).update(class_assigned=group)

        data, counts = compute_statistics(self.year, 'First', level_id=self.level2.pk, class_id=group.pk)
        self.assertEqual(counts, {'totalStudents': 1, 'totalMarks': 2})
        self.assertEqual(data['summaryDocument']['header']['class'], 'EEC 1A')

    def test_annual_covers_all_terms(self):
        """Test the annual label reads every term's marks."""
        self.add_marks(self.carl, self.second_term, ('10', '10'), ('10', '10'))
        _, counts = compute_statistics(self.year, 'annual')
        self.assertEqual(counts['totalMarks'], 8)

        _, counts = compute_statistics(self.year, 'Second')
        self.assertEqual(counts['totalMarks'], 2)

    def test_unknown_term_label(self):
        """Test an unknown term label raises."""
        with self.assertRaises(Term.DoesNotExist):
            compute_statistics(self.year, 'Fourth')

    def test_fetch_marks_pages(self):
        """Test every mark is read across pages."""
        marks = fetch_marks(Mark.objects.all(), page_size=4)
        self.assertEqual(len(marks), 6)
        self.assertEqual(len({mark.pk for mark in marks}), 6)

    def test_fetch_marks_more_than_one_default_page(self):
        """Test more than 1000 marks are all read."""
        Student.objects.bulk_create(
            Student(name=f'Student {n:04d}', matricule=f'BULK{n:04d}', gender=Gender.MALE)
            for n in range(1001)
        )
        students = Student.objects.filter(matricule__startswith='BULK')
        Mark.objects.bulk_create(
            Mark(student=student, course=self.math, term=self.second_term,
                 academic_year=self.year, ca_score=Decimal('10'), exam_score=Decimal('10'))
            for student in students
        )
        marks = fetch_marks(Mark.objects.filter(term=self.second_term))
        self.assertEqual(len(marks), 1001)

    def test_statistics_count_more_than_one_default_page(self):
        """Test the document counts every mark when there are more than 1000."""
        Student.objects.bulk_create(
            Student(name=f'Student {n:04d}', matricule=f'BULK{n:04d}',
                    gender=Gender.FEMALE, department=self.eec)
            for n in range(1001)
        )
        students = list(Student.objects.filter(matricule__startswith='BULK'))
        Enrollment.objects.bulk_create(
            Enrollment(student=student, academic_year=self.year, level=self.level1)
            for student in students
        )
        Mark.objects.bulk_create(
            Mark(student=student, course=self.math, term=self.second_term,
                 academic_year=self.year, ca_score=Decimal('10'), exam_score=Decimal('14'))
            for student in students
        )

        data, counts = compute_statistics(self.year, 'Second')

        # Alice, Bob, Carl and Eve are enrolled too
        self.assertEqual(counts, {'totalStudents': 1005, 'totalMarks': 1001})
        self.assertEqual(data['top3Courses'][0]['name'], 'Mathematics')


# ============ Promotions ============

class PromotionTest(GradebookFixtureMixin, TestCase):
    """Tests for annual averages, repeaters and promotion."""

    def test_calculate_annual_averages(self):
        """Test annual averages and promotion eligibility."""
        self.add_marks(self.alice, self.third_term, ('14', '14'), ('14', '14'))
        result = calculate_annual_averages(self.year)

        by_name = {row['student_name']: row for row in result['students']}
        alice = by_name['Alice Ngwa']
        self.assertEqual(alice['annual_average'], 15.65)
        self.assertTrue(alice['is_eligible_for_promotion'])
        self.assertEqual(alice['next_level'], 'Level 2')
        self.assertEqual(alice['total_subjects'], 2)
        self.assertEqual([term['term_label'] for term in alice['term_averages']], ['First', 'Third'])

        carl = by_name['Carl Eta']
        self.assertFalse(carl['is_eligible_for_promotion'])
        self.assertEqual(carl['next_level'], 'Level 1')

        self.assertEqual(result['summary']['total_students'], 3)
        self.assertEqual(result['summary']['eligible_for_promotion'], 1)
        self.assertEqual(result['summary']['promotion_rate'], 33)

    def test_calculate_annual_averages_for_one_student(self):
        """Test the student filter."""
        result = calculate_annual_averages(self.year, student_id=self.bob.pk)
        self.assertEqual(len(result['students']), 1)
        self.assertEqual(result['students'][0]['annual_average'], 11.99)

    def test_promote_students(self):
        """Test passing students move up and the others repeat."""
        result = promote_students(self.year, self.next_year)
        self.assertEqual(result['message'], 'Processed 3 students')

        alice = Enrollment.objects.get(student=self.alice, academic_year=self.year)
        self.assertTrue(alice.promoted)
        self.assertEqual(alice.promotion_status, PromotionStatus.PROMOTED)
        alice_next = Enrollment.objects.get(student=self.alice, academic_year=self.next_year)
        self.assertEqual(alice_next.level, self.level2)
        self.assertEqual(alice_next.previous_level, self.level1)
        self.assertEqual(alice_next.promotion_status, PromotionStatus.PENDING)
        self.assertFalse(alice_next.is_repeater)

        carl = Enrollment.objects.get(student=self.carl, academic_year=self.year)
        self.assertFalse(carl.promoted)
        self.assertEqual(carl.promotion_status, PromotionStatus.REPEATED)
        carl_next = Enrollment.objects.get(student=self.carl, academic_year=self.next_year)
        self.assertEqual(carl_next.level, self.level1)
        self.assertTrue(carl_next.is_repeater)

    def test_promote_students_twice_does_not_duplicate(self):
        """Test re-running promotion updates next-year enrollments."""
        promote_students(self.year, self.next_year)
        promote_students(self.year, self.next_year)
        self.assertEqual(Enrollment.objects.filter(academic_year=self.next_year).count(), 3)

    def test_final_level_student_gets_no_next_enrollment(self):
        """Test a passing student at the last level is promoted without a new enrollment."""
        Enrollment.objects.filter(student=self.alice, academic_year=self.year).update(level=self.level2)
        result = promote_students(self.year, self.next_year)

        alice = next(row for row in result['results'] if row['student_id'] == self.alice.pk)
        self.assertEqual(alice['promotion_status'], 'promoted')
        self.assertIsNone(alice['next_level'])
        self.assertFalse(Enrollment.objects.filter(student=self.alice, academic_year=self.next_year).exists())

    def test_promote_to_same_year_rejected(self):
        """Test the next academic year must differ."""
        with self.assertRaises(ValueError):
            promote_students(self.year, self.year)

    def test_check_repeaters_corrects_flags(self):
        """Test repeaters are detected from earlier enrollments at the same level."""
        Enrollment.objects.create(student=self.carl, academic_year=self.next_year, level=self.level1)
        Enrollment.objects.create(student=self.alice, academic_year=self.next_year, level=self.level2)

        result = check_repeaters(self.next_year)
        by_id = {row['student_id']: row for row in result['students']}

        self.assertTrue(by_id[self.carl.pk]['is_repeater'])
        self.assertTrue(by_id[self.carl.pk]['status_updated'])
        self.assertEqual(by_id[self.carl.pk]['previous_years_in_same_level'], ['2024/2025'])
        self.assertFalse(by_id[self.alice.pk]['is_repeater'])
        self.assertEqual(result['summary']['total_repeaters'], 1)
        self.assertEqual(result['summary']['status_updates_made'], 1)
        self.assertTrue(Enrollment.objects.get(student=self.carl, academic_year=self.next_year).is_repeater)

    def test_check_repeaters_clears_wrong_flag(self):
        """Test a wrong repeater flag is cleared."""
        Enrollment.objects.filter(student=self.bob).update(is_repeater=True)
        result = check_repeaters(self.year)
        self.assertEqual(result['summary']['total_repeaters'], 0)
        self.assertFalse(Enrollment.objects.get(student=self.bob).is_repeater)


# ============ Student standing and mark sheets ============

class StudentStandingTest(GradebookFixtureMixin, TestCase):
    """Tests for student average, position and course mark sheets."""

    def test_student_average(self):
        """Test the coefficient-weighted term average."""
        result = student_average(self.alice.pk, self.first_term, self.year)
        self.assertEqual(result['average'], 17.3)
        self.assertAlmostEqual(result['totalScore'], 86.5)
        self.assertEqual(result['coefTotal'], 5)
        self.assertEqual(result['validMarksCount'], 2)

    def test_student_average_ignores_empty_marks(self):
        """Test marks without a positive score are left out."""
        drawing = Course.objects.create(name='Drawing', code='DRW101', coefficient=4, level=self.level1)
        Mark.objects.create(
            student=self.alice, course=drawing, term=self.first_term, academic_year=self.year,
            ca_score=Decimal('0'), exam_score=Decimal('0'),
        )
        result = student_average(self.alice.pk, self.first_term, self.year)
        self.assertEqual(result['average'], 17.3)
        self.assertEqual(result['validMarksCount'], 2)

    def test_student_average_without_marks(self):
        """Test a student without marks averages 0."""
        result = student_average(self.alice.pk, self.second_term, self.year)
        self.assertEqual(result, {'average': 0, 'totalScore': 0.0, 'coefTotal': 0, 'validMarksCount': 0})

    def test_student_position(self):
        """Test the rank within department and level."""
        result = student_position(self.bob.pk, self.first_term, self.year)
        self.assertEqual(result, {'position': 2, 'totalStudents': 3, 'average': 11.99})

    def test_student_position_unknown_student(self):
        """Test an unknown student raises."""
        with self.assertRaises(Student.DoesNotExist):
            student_position(999999, self.first_term, self.year)

    def test_course_mark_sheet(self):
        """Test the mark sheet lists the level's students with their marks."""
        dora = self.make_student('Dora Mbah', 'GT004', Gender.FEMALE)
        sheet = course_mark_sheet(self.math, self.first_term, self.year)

        self.assertEqual(
            [row['student_name'] for row in sheet],
            ['Alice Ngwa', 'Bob Tabe', 'Carl Eta', 'Dora Mbah'],
        )
        alice = sheet[0]
        self.assertEqual(alice['total_score'], 18.5)
        self.assertEqual(alice['weighted_score'], 37.0)
        self.assertEqual(alice['grade'], 'A')
        self.assertEqual(alice['remark'], 'Excellent')
        self.assertIsNotNone(alice['mark_id'])

        bob = sheet[1]
        self.assertEqual(bob['grade'], 'E')
        self.assertEqual(bob['remark'], 'Pass')

        dora_row = sheet[3]
        self.assertEqual(dora_row['student_id'], dora.pk)
        self.assertIsNone(dora_row['mark_id'])
        self.assertIsNone(dora_row['grade'])

    def test_course_mark_sheet_limited_to_course_departments(self):
        """Test courses with departments only list those departments' students."""
        self.make_student('Eve Ako', 'GT005', Gender.FEMALE, department=self.elt)
        self.physics.departments.add(self.elt)

        sheet = course_mark_sheet(self.physics, self.first_term, self.year)
        self.assertEqual([row['student_name'] for row in sheet], ['Eve Ako'])


# ============ Exports ============

class ExportsTest(GradebookFixtureMixin, TestCase):
    """Tests for the Excel renderings."""

    def test_report_card_workbook_sheets(self):
        """Test one sheet per card."""
        cards, _ = generate_report_cards(self.first_term, self.year)
        workbook = build_report_card_workbook(cards)
        self.assertEqual(workbook.sheetnames, ['Report Card 1', 'Report Card 2', 'Report Card 3'])

        single = build_report_card_workbook(cards[:1])
        self.assertEqual(single.sheetnames, ['Report Card'])
        ws = single['Report Card']
        self.assertEqual(ws['A6'].value, 'First Term Academic Report 2024/2025')
        self.assertEqual(ws['B8'].value, 'ALICE NGWA')

    def test_empty_report_card_workbook(self):
        """Test no cards still gives a valid workbook."""
        workbook = build_report_card_workbook([])
        self.assertEqual(workbook.sheetnames, ['Report Card'])
        self.assertTrue(workbook_response_bytes(workbook).startswith(b'PK'))

    def test_summary_statistics_workbook(self):
        """Test the summary statistics sheet layout."""
        data, _ = compute_statistics(self.year, 'First')
        workbook = build_summary_statistics_workbook(data['summaryDocument'])
        ws = workbook['Summary Statistics']

        self.assertEqual(ws.page_setup.orientation, 'landscape')
        self.assertEqual(ws['A1'].value, 'SUMMARY STATISTICS OF RESULTS')
        self.assertEqual(ws['A2'].value, 'NAME OF INSTITUTION: GTTTC KUMBA')
        self.assertEqual(ws['A5'].value, 'S/N')
        self.assertEqual(ws['B8'].value, 'MATHEMATICS')
        self.assertEqual(ws['E8'].value, 3)
        self.assertEqual(ws['B9'].value, 'PHYSICS')


# ============ Request forms ============

class RequestFormTest(TestCase):
    """Tests for API request validation."""

    def test_camel_case_keys(self):
        """Test camelCase payloads are accepted."""
        form = ReportCardRequestForm({'termId': 1, 'academicYearId': '2', 'studentId': 5})
        self.assertTrue(form.is_valid())
        self.assertEqual(form.cleaned_data['academic_year_id'], 2)
        self.assertEqual(form.cleaned_data['student_id'], 5)
        self.assertEqual(form.cleaned_data['format'], 'json')

    def test_missing_parameters_message(self):
        """Test the documented message for missing ids."""
        form = ReportCardRequestForm({'termId': 1})
        self.assertFalse(form.is_valid())
        self.assertEqual(form.error_message(), 'Missing required parameters: termId, academicYearId')

        form = StatisticsRequestForm({'academicYearId': 1})
        self.assertFalse(form.is_valid())
        self.assertEqual(form.error_message(), 'Missing parameters')

    def test_invalid_format(self):
        """Test unsupported formats are rejected."""
        form = StatisticsRequestForm({'academicYearId': 1, 'termLabel': 'First', 'format': 'pdf'})
        self.assertFalse(form.is_valid())
        self.assertTrue(form.error_message().startswith('format:'))

    def test_promotion_years_must_differ(self):
        """Test the same current and next year is rejected."""
        form = PromotionRequestForm({'academic_year_id': 3, 'next_academic_year_id': 3})
        self.assertFalse(form.is_valid())
        self.assertEqual(form.error_message(), 'The next academic year must differ from the current one')


# ============ Endpoints ============

class ApiEndpointTest(GradebookFixtureMixin, TestCase):
    """Tests for the JSON endpoints."""

    def setUp(self):
        super().setUp()
        cache.clear()
        self.admin = User.objects.create_school_admin(email='admin@gtttc.cm', password='testpass123')
        self.lecturer = User.objects.create_lecturer(email='lecturer@gtttc.cm', password='testpass123')
        self.client.force_login(self.admin)

    def post_json(self, name, payload, **extra):
        return self.client.post(
            reverse(f'gradebook:{name}'),
            data=json.dumps(payload),
            content_type='application/json',
            **extra
        )

    def test_authentication_required(self):
        """Test anonymous callers get 401."""
        self.client.logout()
        response = self.post_json('get_statistics', {'academicYearId': self.year.pk, 'termLabel': 'First'})
        self.assertEqual(response.status_code, 401)

    def test_promotion_requires_admin(self):
        """Test lecturers cannot run promotion."""
        self.client.force_login(self.lecturer)
        response = self.post_json('promote_students', {
            'academic_year_id': self.year.pk, 'next_academic_year_id': self.next_year.pk,
        })
        self.assertEqual(response.status_code, 403)

    def test_get_not_allowed(self):
        """Test endpoints only accept POST."""
        response = self.client.get(reverse('gradebook:generate_report_cards'))
        self.assertEqual(response.status_code, 405)

    def test_options_preflight(self):
        """Test OPTIONS returns 200 with CORS headers."""
        response = self.client.options(reverse('gradebook:generate_report_cards'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Access-Control-Allow-Origin'], '*')
        self.assertIn('content-type', response['Access-Control-Allow-Headers'])
        self.assertEqual(response.content, b'')

    def test_report_cards_missing_parameters(self):
        """Test 400 when ids are missing."""
        response = self.post_json('generate_report_cards', {'termId': self.first_term.pk})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'error': 'Missing required parameters: termId, academicYearId'})

    def test_report_cards_invalid_json(self):
        """Test 400 on a malformed body."""
        response = self.client.post(
            reverse('gradebook:generate_report_cards'), data='{not json', content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)

    def test_report_cards_unknown_term(self):
        """Test 404 for an unknown term."""
        response = self.post_json('generate_report_cards', {'termId': 9999, 'academicYearId': self.year.pk})
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.json()['success'])

    def test_report_cards_student_not_enrolled(self):
        """Test 404 for a student outside the academic year."""
        outsider = self.make_student('Fred Ayuk', 'GT006', Gender.MALE, year=self.next_year)
        response = self.post_json('generate_report_cards', {
            'termId': self.first_term.pk, 'academicYearId': self.year.pk, 'studentId': outsider.pk,
        })
        self.assertEqual(response.status_code, 404)

    def test_report_cards_json(self):
        """Test the JSON report cards response."""
        response = self.post_json('generate_report_cards', {
            'termId': self.first_term.pk, 'academicYearId': self.year.pk,
        })
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['format'], 'json')
        self.assertEqual(len(body['data']), 3)
        self.assertEqual(body['summary']['total_students'], 3)
        self.assertEqual(response['Access-Control-Allow-Origin'], '*')

    def test_report_cards_excel(self):
        """Test the Excel report cards response."""
        response = self.post_json('generate_report_cards', {
            'termId': self.first_term.pk, 'academicYearId': self.year.pk, 'format': 'excel',
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], XLSX_CONTENT_TYPE)
        self.assertTrue(response.content.startswith(b'PK'))

    def test_report_cards_html(self):
        """Test the printable report cards."""
        response = self.post_json('generate_report_cards', {
            'termId': self.first_term.pk, 'academicYearId': self.year.pk, 'format': 'html',
        })
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'Alice Ngwa')
        self.assertContains(response, 'Mathematics')

    def test_report_cards_html_marks_failing_scores(self):
        """Test scores below the pass mark are red and every discipline count is printed."""
        DisciplineRecord.objects.create(
            student=self.carl, term=self.first_term, academic_year=self.year,
            punishment_hours=3, reprimands=2, suspensions=1,
        )
        response = self.post_json('generate_report_cards', {
            'termId': self.first_term.pk, 'academicYearId': self.year.pk,
            'studentId': self.carl.pk, 'format': 'html',
        })
        self.assertEqual(response.status_code, 200)
        # Mathematics CA 6 and exam 8
        self.assertContains(response, '<td class="num fail">6.00</td>')
        self.assertContains(response, '<td class="num fail">8.00</td>')
        self.assertContains(response, '<td>Punishment (hrs)</td><td class="num">3</td>')
        self.assertContains(response, '<td>Reprimands</td><td class="num">2</td>')
        self.assertContains(response, '<td>Suspensions</td><td class="num">1</td>')

    def test_report_cards_html_passing_scores_not_red(self):
        response = self.post_json('generate_report_cards', {
            'termId': self.first_term.pk, 'academicYearId': self.year.pk,
            'studentId': self.alice.pk, 'format': 'html',
        })
        self.assertContains(response, '<td class="num">18.00</td>')
        self.assertNotContains(response, '<td class="num fail">')

    def test_report_cards_unexpected_error(self):
        """Test unexpected errors give a 500 with details."""
        with patch('gradebook.views.reports.generate_report_cards', side_effect=RuntimeError('boom')):
            with self.assertLogs('gradebook.views.reports', level='ERROR'):
                response = self.post_json('generate_report_cards', {
                    'termId': self.first_term.pk, 'academicYearId': self.year.pk,
                })
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {
            'success': False, 'error': 'boom', 'details': 'Failed to generate report cards',
        })

    def test_statistics_json(self):
        """Test the statistics response and metadata."""
        response = self.post_json('get_statistics', {'academicYearId': self.year.pk, 'termLabel': 'First'})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['metadata']['academicYear'], '2024/2025')
        self.assertEqual(body['metadata']['term'], 'First')
        self.assertEqual(body['metadata']['totalStudents'], 3)
        self.assertEqual(body['metadata']['totalMarks'], 6)
        self.assertIn('generatedAt', body['metadata'])
        self.assertIn('departmentPerformance', body['data'])

    def test_statistics_missing_parameters(self):
        """Test 400 when the term label is missing."""
        response = self.post_json('get_statistics', {'academicYearId': self.year.pk})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'error': 'Missing parameters'})

    def test_statistics_unknown_term_label(self):
        """Test 404 for an unknown term label."""
        response = self.post_json('get_statistics', {'academicYearId': self.year.pk, 'termLabel': 'Fourth'})
        self.assertEqual(response.status_code, 404)

    def test_statistics_excel_query_parameter(self):
        """Test ?format=excel returns the summary workbook."""
        response = self.client.post(
            reverse('gradebook:get_statistics') + '?format=excel',
            data=json.dumps({'academicYearId': self.year.pk, 'termLabel': 'First'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], XLSX_CONTENT_TYPE)

    def test_statistics_unexpected_error(self):
        """Test unexpected errors give the internal server error body."""
        with patch('gradebook.views.reports.compute_statistics', side_effect=RuntimeError('boom')):
            with self.assertLogs('gradebook.views.reports', level='ERROR'):
                response = self.post_json('get_statistics', {'academicYearId': self.year.pk, 'termLabel': 'First'})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'Internal server error', 'details': 'boom'})

    @override_settings(GRADEBOOK_STATISTICS_RATE_LIMIT='1/h')
    def test_statistics_rate_limited(self):
        """Test callers over the rate limit get 429."""
        payload = {'academicYearId': self.year.pk, 'termLabel': 'First'}
        self.assertEqual(self.post_json('get_statistics', payload).status_code, 200)
        response = self.post_json('get_statistics', payload)
        self.assertEqual(response.status_code, 429)

    def test_calculate_annual_averages(self):
        """Test the annual averages endpoint."""
        response = self.post_json('calculate_annual_averages', {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'error': 'academic_year_id is required'})

        response = self.post_json('calculate_annual_averages', {'academic_year_id': self.year.pk})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['summary']['total_students'], 3)

    def test_promote_students(self):
        """Test the promotion endpoint."""
        response = self.post_json('promote_students', {'academic_year_id': self.year.pk})
        self.assertEqual(response.status_code, 400)

        response = self.post_json('promote_students', {
            'academic_year_id': self.year.pk, 'next_academic_year_id': self.next_year.pk,
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['message'], 'Processed 3 students')

    def test_check_repeaters(self):
        """Test the repeater endpoint accepts an empty body."""
        response = self.post_json('check_repeaters', {})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['summary']['total_students'], 3)

    def test_student_average_and_position(self):
        """Test the student standing endpoints."""
        self.client.force_login(self.lecturer)
        payload = {'studentId': self.alice.pk, 'termId': self.first_term.pk, 'academicYearId': self.year.pk}

        response = self.post_json('get_student_average', payload)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['average'], 17.3)

        response = self.post_json('get_student_position', payload)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['position'], 1)

        response = self.post_json('get_student_position', {'studentId': self.alice.pk})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()['error'], 'Missing required parameters: studentId, termId, academicYearId'
        )

    def test_student_marks(self):
        """Test the course mark sheet endpoint."""
        response = self.post_json('get_student_marks', {
            'courseId': self.math.pk, 'termId': self.first_term.pk, 'academicYearId': self.year.pk,
        })
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['course']['code'], 'MAT101')
        self.assertEqual(body['totalStudents'], 3)

        response = self.post_json('get_student_marks', {
            'courseId': 9999, 'termId': self.first_term.pk, 'academicYearId': self.year.pk,
        })
        self.assertEqual(response.status_code, 404)
