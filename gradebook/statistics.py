"""
Term and annual performance statistics.

Scores here use the 40/60 CA/exam weighting (grading.weighted_exam_score),
not the plain mean used on report cards.
"""
import logging

from django.core.paginator import Paginator
from django.utils import timezone

from academics.models import Class, Department, Level
from core.choices import Gender, TermLabel
from core.models import Term
from students.models import Enrollment

from . import config
from .grading import department_score, percentage, round_half_up, weighted_exam_score
from .models import Mark

logger = logging.getLogger(__name__)

ANNUAL = 'annual'


def resolve_term_ids(term_label):
    """
    Ids of the terms covered by a term label. 'annual' covers the first,
    second and third terms.

    Raises:
        Term.DoesNotExist: if no term has the label
    """
    if term_label == ANNUAL:
        return list(Term.objects.filter(
            label__in=[TermLabel.FIRST, TermLabel.SECOND, TermLabel.THIRD]
        ).values_list('id', flat=True))
    return [Term.objects.get(label=term_label).pk]


def eligible_enrollments(academic_year, department_id=None, level_id=None, class_id=None):
    """
    Enrollments included in the statistics. A class filter takes precedence
    over the level and department filters.
    """
    queryset = Enrollment.objects.filter(
        academic_year=academic_year
    ).select_related('student__department', 'level')

    if class_id:
        return queryset.filter(class_assigned_id=class_id)
    if level_id:
        queryset = queryset.filter(level_id=level_id)
    if department_id:
        queryset = queryset.filter(student__department_id=department_id)
    return queryset


def fetch_marks(queryset, page_size=None):
    """
    Read every mark of a queryset in fixed-size pages.

    Pages are requested in primary key order until the paginator's total
    count has been read.
    """
    page_size = page_size or config.MARKS_PAGE_SIZE
    paginator = Paginator(queryset.order_by('pk'), page_size)

    marks = []
    for number in paginator.page_range:
        marks.extend(paginator.page(number).object_list)
    logger.debug(f"Fetched {len(marks)} marks in {paginator.num_pages} page(s)")
    return marks


def _empty_course(mark):
    return {
        'id': mark.course_id,
        'name': mark.course.name,
        'levelName': mark.course.level.name,
        'boysEnrolled': 0,
        'girlsEnrolled': 0,
        'boysPassed': 0,
        'girlsPassed': 0,
        'passedGte10': {'boys': 0, 'girls': 0},
        'avgLte5': {'boys': 0, 'girls': 0},
        'totalScore': 0.0,
        'studentCount': 0,
    }


def _finalize_course(course):
    boys, girls = course['boysEnrolled'], course['girlsEnrolled']
    total_enrolled = boys + girls
    total_passed = course['boysPassed'] + course['girlsPassed']
    gte10 = course['passedGte10']
    lte5 = course['avgLte5']
    gte10_total = gte10['boys'] + gte10['girls']

    return {
        'id': course['id'],
        'name': course['name'],
        'levelName': course['levelName'],
        'boysEnrolled': boys,
        'girlsEnrolled': girls,
        'boysPassed': course['boysPassed'],
        'girlsPassed': course['girlsPassed'],
        'classAverage': round_half_up(course['totalScore'] / course['studentCount'], 2),
        'totalEnrolled': total_enrolled,
        'totalPassed': total_passed,
        'percentPassedBoys': percentage(course['boysPassed'], boys),
        'percentPassedGirls': percentage(course['girlsPassed'], girls),
        'percentPassedTotal': percentage(total_passed, total_enrolled),
        'passedGte10': {
            'boys': gte10['boys'],
            'girls': gte10['girls'],
            'total': gte10_total,
            'boys_percentage': percentage(gte10['boys'], boys),
            'girls_percentage': percentage(gte10['girls'], girls),
            'total_percentage': percentage(gte10_total, total_enrolled),
        },
        'avgLte5': {
            'boys': lte5['boys'],
            'girls': lte5['girls'],
            'total': lte5['boys'] + lte5['girls'],
        },
    }


def _course_summary(course):
    return {
        'name': course['name'],
        'level': course['levelName'],
        'average': course['classAverage'],
        'enrollment': course['totalEnrolled'],
        'passRate': course['percentPassedTotal'],
        'passedGte10': course['passedGte10'],
        'avgLte5': course['avgLte5'],
    }


def _student_summary(student):
    return {
        'name': student['name'],
        'average': student['average'],
        'gender': student['gender'],
        'level': student['level'],
        'department': student['department_name'],
    }


def _gender_counts(rows):
    boys = sum(1 for row in rows if row['gender'] == Gender.MALE)
    girls = sum(1 for row in rows if row['gender'] == Gender.FEMALE)
    return {'total': len(rows), 'boys': boys, 'girls': girls}


def department_performance(departments):
    """
    Line chart data comparing departments, best department score first.

    Args:
        departments: iterable of department accumulators with studentsWhoSat,
            passRate, averageAcademicPerformance and departmentScore
    """
    ranked = sorted(
        (dept for dept in departments if dept['studentsWhoSat'] > 0),
        key=lambda dept: dept['departmentScore'],
        reverse=True,
    )
    return {
        'labels': [dept['abbreviation'] or dept['name'] for dept in ranked],
        'datasets': [
            {
                'label': 'Department Score',
                'data': [dept['departmentScore'] for dept in ranked],
                'borderColor': 'rgb(59, 130, 246)',
                'backgroundColor': 'rgba(59, 130, 246, 0.1)',
                'tension': 0.1,
            },
            {
                'label': 'Pass Rate',
                'data': [dept['passRate'] for dept in ranked],
                'borderColor': 'rgb(34, 197, 94)',
                'backgroundColor': 'rgba(34, 197, 94, 0.1)',
                'borderDash': [5, 5],
                'tension': 0.1,
            },
            {
                'label': 'Avg Academic Performance',
                'data': [dept['averageAcademicPerformance'] / 20 * 100 for dept in ranked],
                'borderColor': 'rgb(249, 115, 22)',
                'backgroundColor': 'rgba(249, 115, 22, 0.1)',
                'borderDash': [3, 3],
                'tension': 0.1,
            },
        ],
        'details': [
            {
                'id': dept['id'],
                'name': dept['name'],
                'abbreviation': dept['abbreviation'],
                'totalStudents': len(dept['students']),
                'studentsWhoSat': dept['studentsWhoSat'],
                'passRate': round_half_up(dept['passRate'], 2),
                'averageAcademicPerformance': round_half_up(dept['averageAcademicPerformance'], 2),
                'departmentScore': dept['departmentScore'],
                'rank': rank,
            }
            for rank, dept in enumerate(ranked, start=1)
        ],
    }


def compute_statistics(academic_year, term_label, department_id=None, level_id=None, class_id=None):
    """
    Build the statistics document for an academic year and term label.

    Args:
        academic_year: AcademicYear instance
        term_label: 'First', 'Second', 'Third' or 'annual'
        department_id, level_id, class_id: optional filters

    Returns:
        tuple: (document, counts). The document holds top/bottom courses and
        students, pass/fail and enrollment counts, the summary document and,
        without a department filter, the department comparison. counts holds
        totalStudents and totalMarks.

    Raises:
        Term.DoesNotExist: if the term label is unknown
    """
    pass_mark = config.PASS_MARK
    credit_mark = config.CREDIT_MARK
    fail_mark = config.FAIL_MARK
    limit = config.RANKING_LIMIT

    # ========== PHASE 1: Resolve terms and students ==========
    term_ids = resolve_term_ids(term_label)
    enrollment_queryset = eligible_enrollments(academic_year, department_id, level_id, class_id)
    enrollments = list(enrollment_queryset)

    students = {}
    for enrollment in enrollments:
        student = enrollment.student
        department = student.department
        students[student.pk] = {
            'id': student.pk,
            'name': student.name,
            'gender': student.gender,
            'department_id': student.department_id,
            'department_name': department.name if department else None,
            'department_abbr': department.abbreviation if department else None,
            'level': enrollment.level.name,
            'totalScore': 0.0,
            'totalCoefficient': 0,
            'courseCount': 0,
        }

    # ========== PHASE 2: Fetch marks page by page ==========
    marks_queryset = Mark.objects.filter(
        academic_year=academic_year,
        term_id__in=term_ids,
        student_id__in=enrollment_queryset.values('student_id'),
    ).select_related('course__level')
    marks = fetch_marks(marks_queryset)

    # ========== PHASE 3: Accumulate ==========
    courses = {}
    departments = {}
    evaluated_course_ids = set()

    for mark in marks:
        student = students.get(mark.student_id)
        if student is None:
            continue

        coefficient = mark.course.coefficient or 1
        score = weighted_exam_score(mark.ca_score, mark.exam_score)
        evaluated_course_ids.add(mark.course_id)

        student['totalScore'] += score * coefficient
        student['totalCoefficient'] += coefficient
        student['courseCount'] += 1

        dept_id = student['department_id']
        if dept_id:
            dept = departments.setdefault(dept_id, {
                'id': dept_id,
                'name': student['department_name'],
                'abbreviation': student['department_abbr'],
                'students': set(),
            })
            dept['students'].add(student['id'])

        course = courses.get(mark.course_id)
        if course is None:
            course = courses[mark.course_id] = _empty_course(mark)
        course['studentCount'] += 1
        course['totalScore'] += score

        side = 'boys' if student['gender'] == Gender.MALE else 'girls'
        course[f'{side}Enrolled'] += 1
        if score >= pass_mark:
            course[f'{side}Passed'] += 1
        if score >= credit_mark:
            course['passedGte10'][side] += 1
        if score <= fail_mark:
            course['avgLte5'][side] += 1

    # ========== PHASE 4: Derive averages and rankings ==========
    ranked_students = []
    for student in students.values():
        if student['courseCount'] == 0:
            continue
        student['average'] = round_half_up(student['totalScore'] / student['totalCoefficient'], 2)
        student['isPassed'] = student['average'] >= pass_mark
        ranked_students.append(student)
    ranked_students.sort(key=lambda s: s['average'], reverse=True)

    for dept in departments.values():
        sat = [s for s in ranked_students if s['department_id'] == dept['id']]
        dept['studentsWhoSat'] = len(sat)
        if sat:
            passed = sum(1 for s in sat if s['isPassed'])
            dept['passRate'] = passed / len(sat) * 100
            dept['averageAcademicPerformance'] = sum(s['average'] for s in sat) / len(sat)
        else:
            dept['passRate'] = 0
            dept['averageAcademicPerformance'] = 0
        dept['departmentScore'] = department_score(dept['passRate'], dept['averageAcademicPerformance'])

    ranked_courses = sorted(
        (_finalize_course(course) for course in courses.values()),
        key=lambda c: c['classAverage'],
        reverse=True,
    )

    # ========== PHASE 5: Totals ==========
    enrolled_rows = [students[e.student_id] for e in enrollments]
    sat_ids = {mark.student_id for mark in marks}
    sat_rows = [row for row in enrolled_rows if row['id'] in sat_ids]
    enrolled = _gender_counts(enrolled_rows)
    sat = _gender_counts(sat_rows)
    sat['percentage'] = percentage(sat['total'], enrolled['total'])

    passed_students = [s for s in ranked_students if s['average'] >= pass_mark]
    failed_students = [s for s in ranked_students if s['average'] < pass_mark]
    passed = _gender_counts(passed_students)
    passed['percentageTotal'] = percentage(passed['total'], sat['total'])
    failed = _gender_counts(failed_students)
    failed['percentageTotal'] = percentage(failed['total'], sat['total'])

    level_name = 'All Levels'
    department_name = 'All Departments'
    class_name = 'All Classes'
    if level_id:
        level_name = Level.objects.filter(pk=level_id).values_list('name', flat=True).first()
    if department_id:
        department_name = Department.objects.filter(pk=department_id).values_list('name', flat=True).first()
    if class_id:
        class_name = Class.objects.filter(pk=class_id).values_list('name', flat=True).first()

    data = {
        'top3Courses': [_course_summary(c) for c in ranked_courses[:limit]],
        'bottom3Courses': [_course_summary(c) for c in ranked_courses[-limit:]],
        'top3Students': [_student_summary(s) for s in ranked_students[:limit]],
        'bottom3Students': [_student_summary(s) for s in ranked_students[-limit:]],
        'passFailStats': {
            'passed': passed,
            'failed': failed,
        },
        'enrollmentStats': {
            'enrolled': enrolled,
            'satForExams': sat,
        },
        'summaryDocument': {
            'header': {
                'institutionName': config.INSTITUTION_NAME,
                'academicYear': academic_year.label,
                'term': term_label,
                'level': level_name,
                'department': department_name,
                'class': class_name,
                'reportDate': timezone.localdate().isoformat(),
            },
            'statistics': [
                {
                    'sn': index,
                    'subject': c['name'],
                    'level': c['levelName'],
                    'enrollment': {
                        'boys': c['boysEnrolled'],
                        'girls': c['girlsEnrolled'],
                        'total': c['totalEnrolled'],
                    },
                    'classAverage': c['classAverage'],
                    'passed': {
                        'boys': c['boysPassed'],
                        'girls': c['girlsPassed'],
                        'total': c['totalPassed'],
                    },
                    'percentPassed': {
                        'boys': c['percentPassedBoys'],
                        'girls': c['percentPassedGirls'],
                        'total': c['percentPassedTotal'],
                    },
                    'passedGte10': c['passedGte10'],
                    'avgLte5': c['avgLte5'],
                }
                for index, c in enumerate(ranked_courses, start=1)
            ],
            'summary': {
                'totalCourses': len(evaluated_course_ids),
                'totalStudents': enrolled,
                'studentsWithMarks': sat,
            },
        },
    }

    if not department_id:
        data['departmentPerformance'] = department_performance(departments.values())

    logger.info(
        f"Statistics for {academic_year} {term_label}: {len(marks)} marks, "
        f"{len(ranked_students)} students with marks"
    )
    return data, {'totalStudents': len(enrollments), 'totalMarks': len(marks)}
