from .models import UserRole


class RoleGroups:
    """Allowed-role sets used to guard endpoints."""
    PORTAL = frozenset({UserRole.EMPLOYEE, UserRole.EMPLOYER, UserRole.ADMIN, UserRole.SUPER_ADMIN})
    EMPLOYER = frozenset({UserRole.EMPLOYER, UserRole.SUPER_ADMIN})
    EMPLOYEE = frozenset({UserRole.EMPLOYEE, UserRole.SUPER_ADMIN})
    SUPER_ADMIN = frozenset({UserRole.SUPER_ADMIN})
    ANY = frozenset(UserRole.values)


# Which one-to-one relation holds the role's profile record.
PROFILE_RELATION = {
    UserRole.EMPLOYEE: 'employee_profile',
    UserRole.EMPLOYER: 'employer_profile',
    UserRole.ADMIN: 'admin_profile',
    UserRole.SUPER_ADMIN: 'admin_profile',
    UserRole.OPERATOR: 'admin_profile',
}


def get_role_profile(user):
    """Return the profile record matching the user's role, or None."""
    relation = PROFILE_RELATION.get(user.role)
    if not relation:
        return None
    return getattr(user, relation, None)
