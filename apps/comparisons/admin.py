from django.contrib import admin  # type: ignore

from .models import CompareListItem


@admin.register(CompareListItem)
class CompareListItemAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "property", "added_at")
    search_fields = ("user__email", "property__title")
