from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User

from .forms import CustomUserCreationForm, CustomUserChangeForm


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """User admin with the back-office role and display name."""
    add_form = CustomUserCreationForm
    form = CustomUserChangeForm

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Back Office', {'fields': ('name', 'role')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('username', 'email', 'name', 'role', 'password1', 'password2'),
        }),
    )
    list_display = ['username', 'name', 'email', 'role', 'is_staff', 'is_active']
    list_filter = BaseUserAdmin.list_filter + ('role',)
    search_fields = ['username', 'name', 'email']
