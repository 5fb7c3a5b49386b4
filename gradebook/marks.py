"""
Per-student standing and the course mark sheet used for mark entry.
"""
import logging
from collections import defaultdict

from students.models import Enrollment, Student

from .grading import evaluate_scores, round_half_up, subject_average
from .models import Mark

logger = logging.getLogger(__name__)


def _has_scores(ca, exam):
    return (ca or 0) > 0 or (exam or 0) > 0


def _average_of(rows):
    """
    Coefficient-weighted average of (ca, exam, coefficient) rows, ignoring
    rows where neither score is above zero.
    """
    total_score = 0.0
    total_coef = 0
    valid = 0
    for ca, exam, coefficient in rows:
        if not _has_scores(ca, exam):
            continue
        total_score += subject_average(ca, exam) * coefficient
        total_coef += coefficient
        valid += 1
    average = total_score / total_coef if total_coef > 0 else 0
    return average, total_score, total_coef, valid


def student_average(student_id, term, academic_year):
    """
    Term average of one student over the subjects with recorded scores.

    Returns:
        dict with average, totalScore, coefTotal and validMarksCount
    """
    rows = Mark.objects.filter(
        student_id=student_id, term=term, academic_year=academic_year
    ).values_list('ca_score', 'exam_score', 'course__coefficient')

    average, total_score, total_coef, valid = _average_of(rows)
    return {
        'average': round_half_up(average, 2),
        'totalScore': total_score,
        'coefTotal': total_coef,
        'validMarksCount': valid,
    }


def student_position(student_id, term, academic_year, department_id=None, level_id=None):
    """
    Position of a student among the students of a department and level.

    Without explicit filters the student's own department and level for the
    academic year are used.

    Raises:
        Student.DoesNotExist: if the student does not exist
    """
    student = Student.objects.get(pk=student_id)
    if department_id is None:
        department_id = student.department_id
    if level_id is None:
        enrollment = student.get_enrollment(academic_year)
        level_id = enrollment.level_id if enrollment else None

    classmates = Enrollment.objects.filter(academic_year=academic_year)
    if department_id:
        classmates = classmates.filter(student__department_id=department_id)
    if level_id:
        classmates = classmates.filter(level_id=level_id)
    classmate_ids = list(classmates.values_list('student_id', flat=True))

    if not classmate_ids:
        return {'position': 1, 'totalStudents': 1, 'average': 0}

    rows_by_student = defaultdict(list)
    rows = Mark.objects.filter(
        student_id__in=classmate_ids, term=term, academic_year=academic_year
    ).values_list('student_id', 'ca_score', 'exam_score', 'course__coefficient')
    for row_student_id, ca, exam, coefficient in rows:
        rows_by_student[row_student_id].append((ca, exam, coefficient))

    averages = sorted(
        ((sid, _average_of(rows_by_student[sid])[0]) for sid in classmate_ids),
        key=lambda item: item[1],
        reverse=True,
    )
    position = next(
        (index for index, (sid, _) in enumerate(averages, start=1) if sid == student.pk),
        len(averages),
    )
    own_average = dict(averages).get(student.pk, 0)
    return {
        'position': position,
        'totalStudents': len(averages),
        'average': round_half_up(own_average, 2),
    }


def course_mark_sheet(course, term, academic_year):
    """
    Students expected to sit a course with their existing marks.

    Students are those enrolled at the course's level for the year, limited
    to the course's departments when any are set.

    Returns:
        list of dicts, one per student, ordered by name
    """
    enrollments = Enrollment.objects.filter(
        academic_year=academic_year, level_id=course.level_id
    ).select_related('student').order_by('student__name')

    department_ids = list(course.departments.values_list('id', flat=True))
    if department_ids:
        enrollments = enrollments.filter(student__department_id__in=department_ids)

    students = [enrollment.student for enrollment in enrollments]
    marks = {
        mark.student_id: mark
        for mark in Mark.objects.filter(
            course=course,
            term=term,
            academic_year=academic_year,
            student_id__in=[s.pk for s in students],
        )
    }

    sheet = []
    for student in students:
        mark = marks.get(student.pk)
        ca = float(mark.ca_score) if mark and mark.ca_score is not None else None
        exam = float(mark.exam_score) if mark and mark.exam_score is not None else None
        evaluation = evaluate_scores(ca, exam, course.coefficient)
        sheet.append({
            'student_id': student.pk,
            'student_name': student.name,
            'student_matricule': student.matricule,
            'student_department_id': student.department_id,
            'ca_score': ca,
            'exam_score': exam,
            'total_score': evaluation['average'],
            'weighted_score': evaluation['weighted'],
            'grade': evaluation['grade'],
            'remark': evaluation['remark'],
            'mark_id': str(mark.pk) if mark else None,
        })
    logger.debug(f"Mark sheet for {course.code}: {len(sheet)} students, {len(marks)} marks")
    return sheet


def course_summary(course):
    """Course fields returned alongside the mark sheet."""
    return {
        'id': course.pk,
        'name': course.name,
        'code': course.code,
        'coefficient': course.coefficient,
        'level_id': course.level_id,
        'department_id': course.department_id,
        'description': course.description,
    }
