from django.contrib import admin
from .models import Category, Badge, Course, CourseModule, Lesson, Exam, Question, Option


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'description']
    search_fields = ['name']
    ordering = ['name']


@admin.register(Badge)
class BadgeAdmin(admin.ModelAdmin):
    list_display = ['name', 'icon']
    search_fields = ['name']
    ordering = ['name']


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['title', 'instructor_id', 'category', 'level', 'status', 'price', 'created_at']
    list_filter = ['level', 'status', 'category']
    search_fields = ['title', 'description']
    ordering = ['-created_at']


@admin.register(CourseModule)
class CourseModuleAdmin(admin.ModelAdmin):
    list_display = ['title', 'course', 'sort_order']
    search_fields = ['title']
    ordering = ['course', 'sort_order']


@admin.register(Lesson)
class LessonAdmin(admin.ModelAdmin):
    list_display = ['title', 'module', 'content_type', 'duration_minutes', 'sort_order']
    list_filter = ['content_type']
    search_fields = ['title', 'description']
    ordering = ['module', 'sort_order']


class OptionInline(admin.TabularInline):
    model = Option
    extra = 0


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ['title', 'course', 'module', 'time_limit_minutes', 'pass_percentage', 'is_active']
    list_filter = ['is_active']
    search_fields = ['title', 'description']


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ['exam', 'sort_order', 'question_type', 'points']
    list_filter = ['question_type']
    search_fields = ['text']
    ordering = ['exam', 'sort_order']
    inlines = [OptionInline]
