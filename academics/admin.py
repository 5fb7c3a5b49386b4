from django.contrib import admin

from unfold.admin import ModelAdmin

from .models import Class, Course, Department, Level


@admin.register(Department)
class DepartmentAdmin(ModelAdmin):
    list_display = ('name', 'abbreviation', 'created_at')
    search_fields = ('name', 'abbreviation')


@admin.register(Level)
class LevelAdmin(ModelAdmin):
    list_display = ('name', 'number')
    ordering = ('number',)


@admin.register(Class)
class ClassAdmin(ModelAdmin):
    list_display = ('name', 'academic_year', 'department', 'level')
    list_filter = ('academic_year', 'department', 'level')
    search_fields = ('name',)


@admin.register(Course)
class CourseAdmin(ModelAdmin):
    list_display = ('code', 'name', 'coefficient', 'level', 'department')
    list_filter = ('level', 'department')
    search_fields = ('name', 'code')
    filter_horizontal = ('departments',)
