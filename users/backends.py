from django.contrib.auth.backends import ModelBackend
from django.contrib.auth import get_user_model
from django.db.models import Q

User = get_user_model()


class EmailOrUsernameModelBackend(ModelBackend):
    """
    Authenticates staff by username or by email address.

    An exact username match wins over an email match so that a username
    that looks like someone else's email cannot shadow it.
    """
    def authenticate(self, request, username=None, password=None, **kwargs):
        if username is None or password is None:
            return None

        identifier = username.strip()
        candidates = list(
            User.objects.filter(
                Q(username__iexact=identifier) | Q(email__iexact=identifier)
            )[:5]
        )
        if not candidates:
            # Hash once anyway so missing accounts take as long as wrong passwords
            User().set_password(password)
            return None

        candidates.sort(key=lambda u: u.username.lower() != identifier.lower())
        for user in candidates:
            if user.check_password(password) and self.user_can_authenticate(user):
                return user

        return None
