from django.contrib import admin

from unfold.admin import ModelAdmin

from .models import DisciplineRecord, Mark


@admin.register(Mark)
class MarkAdmin(ModelAdmin):
    list_display = ('student', 'course', 'term', 'academic_year', 'ca_score', 'exam_score')
    list_filter = ('academic_year', 'term', 'course__level')
    search_fields = ('student__name', 'student__matricule', 'course__code', 'course__name')
    autocomplete_fields = ('student',)
    readonly_fields = ('created_at', 'updated_at')


@admin.register(DisciplineRecord)
class DisciplineRecordAdmin(ModelAdmin):
    list_display = (
        'student', 'term', 'academic_year', 'justified_absences',
        'unjustified_absences', 'conduct',
    )
    list_filter = ('academic_year', 'term', 'conduct')
    search_fields = ('student__name', 'student__matricule')
    autocomplete_fields = ('student',)
