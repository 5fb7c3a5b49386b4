import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('academics', '0001_initial'),
        ('core', '0001_initial'),
        ('students', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Mark',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('ca_score', models.DecimalField(blank=True, decimal_places=2, help_text='Continuous assessment score out of 20', max_digits=4, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('20'))])),
                ('exam_score', models.DecimalField(blank=True, decimal_places=2, help_text='Exam score out of 20', max_digits=4, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('20'))])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('academic_year', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='marks', to='core.academicyear')),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='marks', to='academics.course')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='marks', to='students.student')),
                ('term', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='marks', to='core.term')),
            ],
            options={
                'verbose_name': 'Mark',
                'verbose_name_plural': 'Marks',
                'db_table': 'mark',
                'ordering': ['student', 'course'],
                'indexes': [
                    models.Index(fields=['academic_year', 'term'], name='mark_year_term_idx'),
                    models.Index(fields=['course', 'term', 'academic_year'], name='mark_course_term_year_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(models.Q(('ca_score__gte', 0), ('ca_score__lte', 20)), ('ca_score__isnull', True), _connector='OR'), name='mark_ca_score_range'),
                    models.CheckConstraint(condition=models.Q(models.Q(('exam_score__gte', 0), ('exam_score__lte', 20)), ('exam_score__isnull', True), _connector='OR'), name='mark_exam_score_range'),
                ],
                'unique_together': {('student', 'course', 'term', 'academic_year')},
            },
        ),
        migrations.CreateModel(
            name='DisciplineRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('justified_absences', models.PositiveIntegerField(default=0, help_text='Hours')),
                ('unjustified_absences', models.PositiveIntegerField(default=0, help_text='Hours')),
                ('lateness', models.PositiveIntegerField(default=0, help_text='Number of times late')),
                ('punishment_hours', models.PositiveIntegerField(default=0)),
                ('conduct', models.CharField(choices=[('Excellent', 'Excellent'), ('Good', 'Good'), ('Fair', 'Fair'), ('Poor', 'Poor')], default='Good', max_length=20)),
                ('warnings', models.JSONField(blank=True, default=list, help_text='List of warnings issued during the term')),
                ('reprimands', models.PositiveIntegerField(default=0)),
                ('suspensions', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('academic_year', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='discipline_records', to='core.academicyear')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='discipline_records', to='students.student')),
                ('term', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='discipline_records', to='core.term')),
            ],
            options={
                'verbose_name': 'Discipline Record',
                'verbose_name_plural': 'Discipline Records',
                'db_table': 'discipline_record',
                'ordering': ['student', 'term'],
                'unique_together': {('student', 'term', 'academic_year')},
            },
        ),
    ]
