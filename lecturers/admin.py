from django.contrib import admin

from unfold.admin import ModelAdmin

from .models import Lecturer


@admin.register(Lecturer)
class LecturerAdmin(ModelAdmin):
    list_display = ('full_name', 'email', 'phone', 'is_class_master', 'department', 'level')
    list_filter = ('is_class_master', 'department', 'level')
    search_fields = ('full_name', 'email', 'phone')
    filter_horizontal = ('courses',)
    raw_id_fields = ('user',)
