from .api import (
    calculate_annual_averages_view,
    check_repeaters_view,
    get_student_average_view,
    get_student_marks_view,
    get_student_position_view,
    promote_students_view,
)
from .reports import generate_report_cards_view, get_statistics_view
