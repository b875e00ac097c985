from django.contrib import admin
from .models import Partner, PartnerStatus
from .services import approve_partner, reject_partner, InvalidStatusTransitionError


@admin.register(Partner)
class PartnerAdmin(admin.ModelAdmin):
    list_display = ['shop_name', 'partner_name', 'user', 'category', 'city', 'status', 'created_at']
    list_filter = ['status', 'category', 'city', 'created_at']
    search_fields = ['shop_name', 'partner_name', 'user__email']
    # Status changes go through the approval actions only
    readonly_fields = ['status', 'reviewed_at', 'reviewed_by', 'created_at', 'updated_at']
    date_hierarchy = 'created_at'
    actions = ['approve_selected', 'reject_selected']

    def _review_selected(self, request, queryset, review):
        done = 0
        for partner in queryset.filter(status=PartnerStatus.PENDING):
            try:
                review(partner_id=partner.id, reviewer=request.user)
                done += 1
            except InvalidStatusTransitionError:
                continue
        skipped = queryset.count() - done
        msg = f'Reviewed {done} partner(s).'
        if skipped:
            msg += f' Skipped {skipped} already reviewed.'
        self.message_user(request, msg)

    @admin.action(description='Approve selected pending partners')
    def approve_selected(self, request, queryset):
        self._review_selected(request, queryset, approve_partner)

    @admin.action(description='Reject selected pending partners')
    def reject_selected(self, request, queryset):
        self._review_selected(request, queryset, reject_partner)
