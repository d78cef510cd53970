from django.contrib import admin

from .models import Comment, Report, ReportPhoto, ReportStatusLog


class ReportPhotoInline(admin.TabularInline):
    model = ReportPhoto
    extra = 0


class ReportStatusLogInline(admin.TabularInline):
    model = ReportStatusLog
    extra = 0
    readonly_fields = ("from_status", "to_status", "changed_by", "message", "created_at")
    can_delete = False


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "category", "status", "assigned_office",
                    "assigned_officer", "external_maintainer", "created_at")
    list_filter = ("status", "category")
    search_fields = ("title", "description")
    readonly_fields = ("status", "rejection_reason", "assigned_office",
                       "assigned_officer", "external_maintainer")
    inlines = [ReportPhotoInline, ReportStatusLogInline]


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ("id", "report", "municipality_user", "external_maintainer", "created_at")
    search_fields = ("content",)
