from django.contrib import admin

from unfold.admin import ModelAdmin

from .models import AcademicYear, Term


class PeriodAdmin(ModelAdmin):
    list_display = ('label', 'start_date', 'end_date', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('label',)
    readonly_fields = ('created_at', 'updated_at')


@admin.register(AcademicYear)
class AcademicYearAdmin(PeriodAdmin):
    pass


@admin.register(Term)
class TermAdmin(PeriodAdmin):
    list_display = ('__str__', 'start_date', 'end_date', 'is_active')
