from django.contrib import admin  # type: ignore

from .models import WishlistItem


@admin.register(WishlistItem)
class WishlistItemAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "property", "added_at")
    search_fields = ("user__email", "property__title")
