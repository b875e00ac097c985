"""
Role-based permission classes shared by the marketplace apps.

Permission Classes:
    IsMember - Requires a member account
    IsPartnerUser - Requires a partner account with a partner profile
    IsPlatformAdmin - Requires an admin role or staff flag

Usage:
    from apps.accounts.permissions import IsMember

    @api_view(['POST'])
    @permission_classes([IsAuthenticated, IsMember])
    def generate_coupon(request):
        ...
"""

from rest_framework.permissions import BasePermission


class IsMember(BasePermission):
    """Allow access only to member accounts."""

    message = 'Only members can perform this action.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_member)


class IsPartnerUser(BasePermission):
    """
    Allow access only to partner accounts that have a partner profile.

    Approval status is not checked here: pending or rejected partners may
    still read their own data. Business rules that depend on approval
    (minting, redemption) are enforced in the services layer.
    """

    message = 'Only partner accounts can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated and user.is_partner):
            return False
        return hasattr(user, 'partner_profile')


class IsPlatformAdmin(BasePermission):
    """Allow access only to platform administrators."""

    message = 'Only administrators can perform this action.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_platform_admin)
