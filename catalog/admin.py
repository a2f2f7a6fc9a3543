"""
Catalog — Django Admin Configuration

@file catalog/admin.py
"""

from django.contrib import admin

from .models import Product, ProductVariant, Supplier


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'contact_info', 'created_at')
    search_fields = ('name', 'contact_info')
    ordering = ('name',)


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0
    fields = ('sku', 'color', 'size', 'price')


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'category', 'brand')
    list_filter = ('category', 'brand')
    search_fields = ('name', 'category', 'brand')
    inlines = [ProductVariantInline]


@admin.register(ProductVariant)
class ProductVariantAdmin(admin.ModelAdmin):
    list_display = ('id', 'sku', 'product', 'color', 'size', 'price')
    list_filter = ('product__category', 'product__brand')
    search_fields = ('sku', 'product__name', 'color', 'size')
    list_select_related = ('product',)
    ordering = ('product__name', 'color', 'size')
