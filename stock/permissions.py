"""
Stock — Permissions

Reads: any authenticated user. Quantity mutations and receipt workflow:
staff or members of the "warehouse" group. Physical count audits: staff or
members of the "auditor" group.

@file stock/permissions.py
"""

from rest_framework.permissions import SAFE_METHODS, BasePermission

WAREHOUSE_GROUP = 'warehouse'
AUDITOR_GROUP = 'auditor'


def _in_group(user, name: str) -> bool:
    return user.groups.filter(name=name).exists()


class IsWarehouseStaff(BasePermission):
    """Safe methods: authenticated. Writes: staff or warehouse group."""

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method in SAFE_METHODS:
            return True
        return request.user.is_staff or _in_group(request.user, WAREHOUSE_GROUP)


class IsStockAuditor(BasePermission):

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method in SAFE_METHODS:
            return True
        return request.user.is_staff or _in_group(request.user, AUDITOR_GROUP)
