import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Offering',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('party', 'Party'), ('soi', 'Show of Interest')], max_length=10)),
                ('party_size', models.PositiveSmallIntegerField()),
                ('meetup_point', models.CharField(max_length=255)),
                ('drop_off', models.CharField(max_length=255)),
                ('ride_options', models.JSONField(blank=True, default=list)),
                ('display_university', models.BooleanField(default=False)),
                ('host_university', models.CharField(blank=True, max_length=120, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('duration_minutes', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('expires_at', models.DateTimeField(blank=True, null=True)),
                ('host_comments', models.TextField(blank=True, null=True)),
                ('is_friends_only', models.BooleanField(default=False)),
                ('start_time', models.DateTimeField(blank=True, null=True)),
                ('expiry_timestamp', models.DateTimeField(blank=True, null=True)),
                ('holds_host_slot', models.BooleanField(default=True)),
                ('member_count', models.PositiveSmallIntegerField(default=0)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('host', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='hosted_offerings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'offerings',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['kind', 'is_active', 'expires_at'], name='offering_party_window_idx'),
                    models.Index(fields=['kind', 'is_active', 'start_time'], name='offering_soi_window_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('holds_host_slot', True)), fields=('host', 'kind'), name='one_live_offering_per_host_kind'),
                    models.CheckConstraint(condition=models.Q(('member_count__lte', models.F('party_size'))), name='offering_members_within_party_size'),
                    models.CheckConstraint(condition=models.Q(('party_size__gte', 1), ('party_size__lte', 7)), name='offering_party_size_range'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Membership',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('joined', 'Joined'), ('left', 'Left'), ('kicked', 'Kicked')], default='joined', max_length=10)),
                ('contact_shared', models.BooleanField(default=False)),
                ('joined_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('left_at', models.DateTimeField(blank=True, null=True)),
                ('offering', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to='offerings.offering')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='offering_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'offering_memberships',
                'ordering': ['joined_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('offering', 'user'), name='unique_offering_member'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Party',
            fields=[],
            options={
                'verbose_name_plural': 'parties',
                'proxy': True,
                'indexes': [],
                'constraints': [],
            },
            bases=('offerings.offering',),
        ),
        migrations.CreateModel(
            name='ShowOfInterest',
            fields=[],
            options={
                'verbose_name': 'show of interest',
                'verbose_name_plural': 'shows of interest',
                'proxy': True,
                'indexes': [],
                'constraints': [],
            },
            bases=('offerings.offering',),
        ),
    ]
