from django.contrib import admin

from unfold.admin import ModelAdmin, TabularInline

from .models import Enrollment, Student


class EnrollmentInline(TabularInline):
    model = Enrollment
    fk_name = 'student'
    extra = 0
    fields = ('academic_year', 'level', 'class_assigned', 'is_repeater', 'promotion_status')


@admin.register(Student)
class StudentAdmin(ModelAdmin):
    list_display = ('name', 'matricule', 'gender', 'department', 'date_of_birth')
    list_filter = ('gender', 'department')
    search_fields = ('name', 'matricule')
    inlines = [EnrollmentInline]


@admin.register(Enrollment)
class EnrollmentAdmin(ModelAdmin):
    list_display = ('student', 'academic_year', 'level', 'class_assigned', 'is_repeater', 'promotion_status')
    list_filter = ('academic_year', 'level', 'is_repeater', 'promotion_status')
    search_fields = ('student__name', 'student__matricule')
    autocomplete_fields = ('student',)
