"""
Grading rules for marks out of 20.

Two different formulas combine a CA score and an exam score into one mark:

- report cards, annual averages, promotion and student standing use the
  simple mean ``(ca + exam) / 2`` (see ``subject_average``);
- the statistics document uses a 40/60 weighting ``ca * 0.4 + exam * 0.6``
  (see ``weighted_exam_score``).

Each module applies its own formula throughout; they are not interchangeable.
"""
from decimal import ROUND_HALF_UP, Decimal

from . import config


# (minimum average, grade), highest first
GRADE_SCALE = [
    (18.5, 'A'),
    (16.5, 'B'),
    (15.5, 'C'),
    (13.5, 'D'),
    (12, 'E'),
]
FAIL_GRADE = 'F'

# (minimum average, remark), highest first
REMARK_SCALE = [
    (18.5, 'Excellent'),
    (16.5, 'Very Good'),
    (14.5, 'Good'),
    (13.5, 'Fair'),
    (12, 'Average'),
    (10, 'Below Avg'),
    (8, 'Poor'),
    (6, 'Very Poor'),
]
LOWEST_REMARK = 'Weak'

# Remarks shown on the mark entry sheet, keyed by grade
GRADE_REMARKS = {
    'A': 'Excellent',
    'B': 'Very Good',
    'C': 'Good',
    'D': 'Fair',
    'E': 'Pass',
    'F': 'Fail',
}


def subject_average(ca, exam):
    """Report-card average of a mark: the plain mean of CA and exam."""
    return (float(ca or 0) + float(exam or 0)) / 2


def weighted_exam_score(ca, exam):
    """Statistics score of a mark: CA counts 40%, exam 60%."""
    return float(ca or 0) * 0.4 + float(exam or 0) * 0.6


def grade_for_average(average):
    """
    Letter grade for an average out of 20.

    Args:
        average: float average, or None

    Returns:
        str: 'A' to 'F', or None when there is no average
    """
    if average is None:
        return None
    for minimum, grade in GRADE_SCALE:
        if average >= minimum:
            return grade
    return FAIL_GRADE


def remark_for_average(average):
    """Report-card remark for an average out of 20."""
    for minimum, remark in REMARK_SCALE:
        if average >= minimum:
            return remark
    return LOWEST_REMARK


def is_pass(average):
    return average is not None and average >= config.PASS_MARK


def weighted_average(pairs):
    """
    Coefficient-weighted mean of (average, coefficient) pairs.

    Returns:
        tuple: (average, total weighted score, total coefficient). The
        average is 0 when the total coefficient is 0.
    """
    total_weighted = 0.0
    total_coef = 0
    for average, coefficient in pairs:
        total_weighted += average * coefficient
        total_coef += coefficient
    average = total_weighted / total_coef if total_coef > 0 else 0
    return average, total_weighted, total_coef


def evaluate_scores(ca, exam, coefficient):
    """
    Mark entry evaluation of a pair of scores.

    A missing score is replaced by the other one; with both missing every
    value is None.

    Returns:
        dict with average, weighted, grade and remark
    """
    if ca is None and exam is None:
        average = None
    elif exam is None:
        average = float(ca)
    elif ca is None:
        average = float(exam)
    else:
        average = subject_average(ca, exam)

    grade = grade_for_average(average)
    return {
        'average': average,
        'weighted': average * coefficient if average is not None else None,
        'grade': grade,
        'remark': GRADE_REMARKS.get(grade),
    }


def department_score(pass_rate, average_performance):
    """
    Composite department score out of 100.

    Args:
        pass_rate: percentage of students with a passing average (0-100)
        average_performance: mean student average out of 20

    Returns:
        float rounded to 2 decimals
    """
    score = (
        pass_rate * config.DEPARTMENT_PASS_RATE_WEIGHT
        + (average_performance / 20 * 100) * config.DEPARTMENT_PERFORMANCE_WEIGHT
    )
    return round_half_up(score, 2)


def percentage(part, whole, digits=1):
    """part / whole as a percentage, 0 when whole is 0."""
    if not whole:
        return 0
    return round_half_up(part / whole * 100, digits)


def round_half_up(value, digits=2):
    """Round to a number of decimals with ties going up (11.125 -> 11.13)."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
