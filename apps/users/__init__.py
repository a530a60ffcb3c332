"""Users app package.

Defines the platform user model (email login) and the closed set of roles
and permissions used by the reservation engine. Use
``apps.users.models.CustomUser`` as the AUTH_USER_MODEL throughout the
project.
"""
