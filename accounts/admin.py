from django.contrib import admin
from .models import (
    Rol,
    UserProfile,
    Menu,
    Submenu,
    RoleMenuPermission,
    RoleSubmenuPermission,
    UserMenuPermission,
    UserSubmenuPermission,
)


@admin.register(Rol)
class RolAdmin(admin.ModelAdmin):
    list_display = ("name", "descripcion")
    search_fields = ("name",)


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "rol", "sede", "activo", "created_at")
    search_fields = ("user__username", "user__email", "user__first_name", "user__last_name")
    list_filter = ("rol", "sede", "activo")
    autocomplete_fields = ("user",)
    exclude = ("session_token",)
    ordering = ("user__username",)


class SubmenuInline(admin.TabularInline):
    model = Submenu
    fk_name = "menu"
    extra = 0
    fields = ("name", "label", "route", "parent", "level", "order_index", "is_active")


@admin.register(Menu)
class MenuAdmin(admin.ModelAdmin):
    list_display = ("name", "label", "route", "order_index", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "label")
    inlines = [SubmenuInline]


@admin.register(Submenu)
class SubmenuAdmin(admin.ModelAdmin):
    list_display = ("name", "label", "menu", "level", "order_index", "is_active")
    list_filter = ("menu", "is_active")
    search_fields = ("name", "label")


PERMISO_FIELDS = ("can_view", "can_create", "can_edit", "can_delete")


@admin.register(RoleMenuPermission)
class RoleMenuPermissionAdmin(admin.ModelAdmin):
    list_display = ("rol", "menu") + PERMISO_FIELDS
    list_filter = ("rol",)


@admin.register(RoleSubmenuPermission)
class RoleSubmenuPermissionAdmin(admin.ModelAdmin):
    list_display = ("rol", "submenu") + PERMISO_FIELDS
    list_filter = ("rol",)


@admin.register(UserMenuPermission)
class UserMenuPermissionAdmin(admin.ModelAdmin):
    list_display = ("user", "menu") + PERMISO_FIELDS
    search_fields = ("user__username",)


@admin.register(UserSubmenuPermission)
class UserSubmenuPermissionAdmin(admin.ModelAdmin):
    list_display = ("user", "submenu") + PERMISO_FIELDS
    search_fields = ("user__username",)
