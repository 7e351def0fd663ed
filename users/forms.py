from django.contrib.auth.forms import UserCreationForm, UserChangeForm
from .models import User


class CustomUserCreationForm(UserCreationForm):
    class Meta(UserCreationForm.Meta):
        model = User
        fields = ('username', 'email', 'name', 'role')

    def save(self, commit=True):
        user = super().save(commit=False)
        # Admins get access to the Django admin site
        user.is_staff = user.role == User.ADMIN or user.is_superuser

        if commit:
            user.save()
        return user


class CustomUserChangeForm(UserChangeForm):
    class Meta(UserChangeForm.Meta):
        model = User
