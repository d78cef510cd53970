from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import MunicipalityRole, User


@admin.register(MunicipalityRole)
class MunicipalityRoleAdmin(admin.ModelAdmin):
    list_display = ("name", "description")
    search_fields = ("name",)
    ordering = ("name",)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "first_name", "last_name",
                    "role_type", "municipality_role", "maintainer_category",
                    "is_active")
    search_fields = ("username", "email", "company_name")
    list_filter = ("is_active", "role_type", "municipality_role")
    filter_horizontal = ("groups", "user_permissions")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Role", {"fields": ("role_type", "municipality_role",
                             "company_name", "maintainer_category")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Role", {"fields": ("email", "first_name", "last_name", "role_type",
                             "municipality_role", "company_name",
                             "maintainer_category")}),
    )
