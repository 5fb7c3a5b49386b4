from django.urls import path
from . import views

app_name = 'gradebook'

urlpatterns = [
    # Reports
    path('api/generate-report-cards/', views.generate_report_cards_view, name='generate_report_cards'),
    path('api/get-statistics/', views.get_statistics_view, name='get_statistics'),

    # Annual averages and promotion
    path('api/calculate-annual-averages/', views.calculate_annual_averages_view, name='calculate_annual_averages'),
    path('api/check-repeaters/', views.check_repeaters_view, name='check_repeaters'),
    path('api/promote-students/', views.promote_students_view, name='promote_students'),

    # Student standing and mark sheets
    path('api/get-student-average/', views.get_student_average_view, name='get_student_average'),
    path('api/get-student-position/', views.get_student_position_view, name='get_student_position'),
    path('api/get-student-marks/', views.get_student_marks_view, name='get_student_marks'),
]
