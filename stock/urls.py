"""
Stock — URL Configuration

@file stock/urls.py
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import InventoryReportViewSet, StockAuditViewSet, StockLevelViewSet, StockReceiptViewSet

app_name = 'stock'

router = DefaultRouter()
router.register('levels', StockLevelViewSet, basename='level')
router.register('receipts', StockReceiptViewSet, basename='receipt')
router.register('audits', StockAuditViewSet, basename='audit')
router.register('reports', InventoryReportViewSet, basename='report')

urlpatterns = [
    path('', include(router.urls)),
]
