"""
Report card assembly.

A report card is built per student for one term of an academic year from
the student's marks, discipline record and enrollment. Cards are plain dicts
shaped for the JSON API, the printable template and the Excel export.
"""
import logging
from collections import defaultdict

from lecturers.models import Lecturer
from students.models import Enrollment, Student

from .grading import (
    grade_for_average, is_pass, percentage, remark_for_average,
    round_half_up, subject_average, weighted_average,
)
from .models import DisciplineRecord, Mark

logger = logging.getLogger(__name__)


def _format_date(value):
    return value.isoformat() if value else 'N/A'


def _min_max(values, digits):
    if not values:
        return f"{0:.{digits}f} - {0:.{digits}f}"
    return f"{min(values):.{digits}f} - {max(values):.{digits}f}"


class ReportCardGenerator:
    """
    Builds report cards for one term of an academic year.

    Subject min/max ranges and class master names are looked up once per
    level and per department/level pair for the lifetime of the generator.
    """

    def __init__(self, term, academic_year):
        self.term = term
        self.academic_year = academic_year
        self.skipped = []
        self._subject_ranges = {}
        self._class_masters = {}

    # ========== STUDENT SELECTION ==========

    def get_enrollments(self, student_id=None, department_id=None, level_id=None):
        """
        Enrollments of the students to report on.

        Raises:
            Student.DoesNotExist: if student_id is not enrolled in the academic year
        """
        queryset = Enrollment.objects.filter(
            academic_year=self.academic_year
        ).select_related('student__department', 'level', 'previous_level')

        if student_id:
            enrollment = queryset.filter(student_id=student_id).first()
            if enrollment is None:
                raise Student.DoesNotExist(
                    f"Student {student_id} is not enrolled in {self.academic_year}"
                )
            return [enrollment]

        if department_id:
            queryset = queryset.filter(student__department_id=department_id)
        if level_id:
            queryset = queryset.filter(level_id=level_id)
        return list(queryset.order_by('student__name'))

    # ========== LOOKUPS ==========

    def subject_range(self, course_id, level_id):
        """
        'min - max' of the averages for a course among students of a level.
        All courses of a level are computed with a single query.
        """
        if level_id not in self._subject_ranges:
            averages = defaultdict(list)
            rows = Mark.objects.filter(
                term=self.term,
                academic_year=self.academic_year,
                student__enrollments__academic_year=self.academic_year,
                student__enrollments__level_id=level_id,
            ).values_list('course_id', 'ca_score', 'exam_score')
            for row_course_id, ca, exam in rows:
                averages[row_course_id].append(subject_average(ca, exam))
            self._subject_ranges[level_id] = {
                key: _min_max(values, 1) for key, values in averages.items()
            }
        return self._subject_ranges[level_id].get(course_id, _min_max([], 1))

    def class_master(self, department_id, level_id):
        key = (department_id, level_id)
        if key not in self._class_masters:
            self._class_masters[key] = Lecturer.class_master_name(department_id, level_id)
        return self._class_masters[key]

    def annual_average(self, student):
        """Mean of the student's term averages across the academic year."""
        by_term = defaultdict(list)
        marks = Mark.objects.filter(
            student=student, academic_year=self.academic_year
        ).select_related('course')
        for mark in marks:
            by_term[mark.term_id].append(
                (subject_average(mark.ca_score, mark.exam_score), mark.course.coefficient)
            )
        term_averages = [weighted_average(pairs)[0] for pairs in by_term.values()]
        if not term_averages:
            return 0
        return sum(term_averages) / len(term_averages)

    # ========== CARD ==========

    def build_subjects(self, student, level_id):
        marks = Mark.objects.filter(
            student=student,
            term=self.term,
            academic_year=self.academic_year,
        ).select_related('course').order_by('course__name')

        subjects = []
        for mark in marks:
            average = subject_average(mark.ca_score, mark.exam_score)
            coefficient = mark.course.coefficient
            subjects.append({
                'subject': mark.course.name,
                'competencies': 'N/A',
                'ca_score': mark.ca,
                'exam_score': mark.exam,
                'average': average,
                'coef': coefficient,
                'weighted_average': average * coefficient,
                'grade': grade_for_average(average),
                'min_max_average': self.subject_range(mark.course_id, level_id),
                'remark_on_average': remark_for_average(average),
            })
        return subjects

    def build_card(self, enrollment):
        """Report card of one enrolled student. Class statistics are filled in later."""
        student = enrollment.student
        department = student.department
        subjects = self.build_subjects(student, enrollment.level_id)

        term_average, total_weighted, total_coef = weighted_average(
            (subject['average'], subject['coef']) for subject in subjects
        )

        annual_average = 0
        annual_num_passed = 0
        if self.term.is_third:
            annual_average = self.annual_average(student)
            annual_num_passed = 1 if is_pass(annual_average) else 0

        record = DisciplineRecord.objects.filter(
            student=student, term=self.term, academic_year=self.academic_year
        ).first()
        discipline = record.as_report_snapshot() if record else DisciplineRecord.default_snapshot()

        previous_level_name = enrollment.previous_level.name if enrollment.previous_level else None

        return {
            'academic_year': self.academic_year.label,
            'term': self.term.label,
            'student_name': student.name,
            'dob': _format_date(student.date_of_birth),
            'pob': student.place_of_birth or 'N/A',
            'department': department.display_code if department else 'N/A',
            'level': enrollment.level.name,
            'gender': student.gender,
            'num_subjects': len(subjects),
            'student_id': student.matricule or 'N/A',
            'num_passed': sum(1 for subject in subjects if is_pass(subject['average'])),
            'repeater': 'Yes' if enrollment.is_repeater else 'No',
            'promotion_status': enrollment.promotion_status,
            'previous_level': previous_level_name,
            'class_master': self.class_master(student.department_id, enrollment.level_id),
            'student_photo_base64': student.photo_as_data_uri(),
            'subjects': subjects,
            'discipline': discipline,
            'performance': {
                'total_weighted_score': total_weighted,
                'total_coef': total_coef,
                'class_postion': '0',
                'term_average': round_half_up(term_average, 2),
                'performance_remark': remark_for_average(term_average),
            },
            'class_profile': {
                'class_average': 0,
                'min_max': '0 - 0',
                'num_enrolled': 0,
                'num_passed': 0,
                'annual_average': round_half_up(annual_average, 2),
                'annual_num_passed': annual_num_passed,
            },
            'repeater_info': {
                'is_repeater': enrollment.is_repeater,
                'promotion_status': enrollment.promotion_status,
                'previous_level_id': enrollment.previous_level_id,
                'previous_level_name': previous_level_name,
            },
        }

    # ========== CLASS STATISTICS ==========

    def class_averages(self, enrollment):
        """
        Term averages of every student with marks in the same department and
        level as the enrollment, keyed by student id.
        """
        classmate_ids = Enrollment.objects.filter(
            academic_year=self.academic_year,
            level_id=enrollment.level_id,
            student__department_id=enrollment.student.department_id,
        ).values_list('student_id', flat=True)

        pairs_by_student = defaultdict(list)
        rows = Mark.objects.filter(
            student_id__in=classmate_ids,
            term=self.term,
            academic_year=self.academic_year,
        ).values_list('student_id', 'ca_score', 'exam_score', 'course__coefficient')
        for student_id, ca, exam, coefficient in rows:
            pairs_by_student[student_id].append((subject_average(ca, exam), coefficient))

        return {
            student_id: weighted_average(pairs)[0]
            for student_id, pairs in pairs_by_student.items()
        }

    def apply_single_student_profile(self, card, enrollment):
        """Rank one student against the classmates' averages."""
        averages = self.class_averages(enrollment)
        own_average = averages.get(enrollment.student_id, card['performance']['term_average'])
        values = list(averages.values())

        rank = 1 + sum(1 for value in values if value > own_average)
        class_average = sum(values) / len(values) if values else 0

        card['performance']['class_postion'] = str(rank)
        card['class_profile'].update({
            'class_average': round_half_up(class_average, 2),
            'min_max': _min_max(values, 2),
            'num_enrolled': len(values),
            'num_passed': sum(1 for value in values if is_pass(value)),
        })

        passed = is_pass(card['performance']['term_average'])
        return {
            'total_students': 1,
            'class_average': card['class_profile']['class_average'],
            'students_passed': 1 if passed else 0,
            'pass_rate': 100 if passed else 0,
        }

    def apply_bulk_profile(self, cards):
        """Sort cards by term average and rank them by position."""
        cards.sort(key=lambda card: card['performance']['term_average'], reverse=True)

        averages = [card['performance']['term_average'] for card in cards]
        class_average = sum(averages) / len(averages) if averages else 0
        num_passed = sum(1 for value in averages if is_pass(value))
        min_max = _min_max(averages, 2)

        for index, card in enumerate(cards):
            card['performance']['class_postion'] = str(index + 1)
            card['class_profile'].update({
                'class_average': round_half_up(class_average, 2),
                'min_max': min_max,
                'num_enrolled': len(cards),
                'num_passed': num_passed,
            })

        return {
            'total_students': len(cards),
            'class_average': round_half_up(class_average, 2),
            'students_passed': num_passed,
            'pass_rate': int(percentage(num_passed, len(cards), digits=0)),
        }

    # ========== ENTRY POINT ==========

    def generate(self, student_id=None, department_id=None, level_id=None):
        """
        Build report cards for the selected students.

        Students whose card cannot be built are logged and left out; their ids
        are listed in summary['skipped_students'].

        Returns:
            tuple: (list of card dicts, summary dict)
        """
        enrollments = self.get_enrollments(student_id, department_id, level_id)
        logger.info(
            f"Generating {len(enrollments)} report card(s) for {self.term} {self.academic_year}"
        )

        cards = []
        for enrollment in enrollments:
            try:
                cards.append(self.build_card(enrollment))
            except Exception:
                logger.exception(f"Error processing student {enrollment.student_id}")
                self.skipped.append(enrollment.student_id)

        if student_id and cards:
            summary = self.apply_single_student_profile(cards[0], enrollments[0])
        else:
            summary = self.apply_bulk_profile(cards)

        summary['skipped_students'] = list(self.skipped)
        return cards, summary


def generate_report_cards(term, academic_year, student_id=None, department_id=None, level_id=None):
    """Build report cards for a term. See ReportCardGenerator.generate."""
    generator = ReportCardGenerator(term, academic_year)
    return generator.generate(student_id, department_id, level_id)
