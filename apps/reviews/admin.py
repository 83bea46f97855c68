"""Admin registration for reviews."""

from django.contrib import admin  # type: ignore

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('id', 'property', 'reviewer', 'rating', 'is_anonymous', 'is_flagged', 'created_at')
    list_filter = ('rating', 'is_anonymous', 'is_flagged')
    search_fields = ('property__title', 'reviewer__email', 'comment')
    readonly_fields = ('flagged_by', 'flagged_at', 'created_at', 'updated_at')
