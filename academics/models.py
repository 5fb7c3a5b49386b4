from django.core.validators import MinValueValidator
from django.db import models


class Department(models.Model):
    """
    Teaching department (e.g., Electrical Engineering, ELT).
    Students belong to exactly one department.
    """
    name = models.CharField(max_length=100, unique=True)
    abbreviation = models.CharField(
        max_length=10,
        blank=True,
        help_text="Short code printed on report cards, e.g., EEC"
    )
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = "Department"
        verbose_name_plural = "Departments"

    def __str__(self):
        return self.name

    @property
    def display_code(self):
        return self.abbreviation or self.name


class Level(models.Model):
    """
    Year of study (Level 1, Level 2, ...). Promotion moves a student
    to the level with the next number.
    """
    name = models.CharField(max_length=50, unique=True, help_text="e.g., Level 1")
    number = models.PositiveSmallIntegerField(unique=True, help_text="1, 2, 3, etc.")

    class Meta:
        ordering = ['number']
        verbose_name = "Level"
        verbose_name_plural = "Levels"

    def __str__(self):
        return self.name

    def get_next_level(self):
        """Level a passing student is promoted to, or None at the final level."""
        return Level.objects.filter(number=self.number + 1).first()


class Class(models.Model):
    """
    A class group of students for one academic year, department and level.
    """
    name = models.CharField(max_length=50)
    academic_year = models.ForeignKey(
        'core.AcademicYear',
        on_delete=models.CASCADE,
        related_name='classes'
    )
    department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        related_name='classes'
    )
    level = models.ForeignKey(
        Level,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='classes'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['academic_year', 'department', 'level', 'name']
        verbose_name = "Class"
        verbose_name_plural = "Classes"
        unique_together = ['academic_year', 'name']

    def __str__(self):
        return f"{self.name} ({self.academic_year})"


class Course(models.Model):
    """
    A course taught at one level. The coefficient weights the course's
    contribution to a student's term average.
    """
    name = models.CharField(max_length=150)
    code = models.CharField(max_length=20, unique=True)
    coefficient = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        help_text="Weight of the course in the term average"
    )
    level = models.ForeignKey(
        Level,
        on_delete=models.PROTECT,
        related_name='courses'
    )
    department = models.ForeignKey(
        Department,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='owned_courses',
        help_text="Department that owns the course"
    )
    departments = models.ManyToManyField(
        Department,
        blank=True,
        related_name='courses',
        help_text="Departments whose students take this course. Empty means every department."
    )
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['level', 'name']
        verbose_name = "Course"
        verbose_name_plural = "Courses"

    def __str__(self):
        return f"{self.code} - {self.name}"
