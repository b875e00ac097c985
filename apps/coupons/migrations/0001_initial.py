import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('offers', '0001_initial'),
        ('partners', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Coupon',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('coupon_code', models.CharField(max_length=32, unique=True)),
                ('redemption_token', models.CharField(max_length=64, unique=True)),
                ('status', models.CharField(choices=[('active', 'Active'), ('redeemed', 'Redeemed'), ('expired', 'Expired')], default='active', max_length=20)),
                ('issued_at', models.DateTimeField()),
                ('expiry_date', models.DateTimeField()),
                ('redeemed_at', models.DateTimeField(blank=True, null=True)),
                ('coupon_color', models.CharField(max_length=7)),
                ('member', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='coupons', to=settings.AUTH_USER_MODEL)),
                ('offer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='coupons', to='offers.offer')),
                ('partner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='coupons', to='partners.partner')),
            ],
            options={
                'db_table': 'coupons',
                'ordering': ['-issued_at'],
                'indexes': [
                    models.Index(fields=['member', 'status'], name='coupons_member_status_idx'),
                    models.Index(fields=['partner', 'status'], name='coupons_partner_status_idx'),
                    models.Index(fields=['offer', 'issued_at'], name='coupons_offer_issued_idx'),
                    models.Index(fields=['expiry_date'], name='coupons_expiry_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status', 'active')), fields=('offer', 'member'), name='coupons_one_active_per_member_offer'),
                    models.CheckConstraint(condition=models.Q(models.Q(('redeemed_at__isnull', False), ('status', 'redeemed')), models.Q(models.Q(('status', 'redeemed'), _negated=True), ('redeemed_at__isnull', True)), _connector='OR'), name='coupons_redeemed_at_matches_status'),
                ],
            },
        ),
    ]
