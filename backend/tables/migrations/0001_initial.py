from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Table',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('table_number', models.PositiveIntegerField(unique=True, validators=[django.core.validators.MinValueValidator(1)])),
                ('name', models.CharField(blank=True, max_length=100)),
                ('section', models.CharField(choices=[('Main Hall', 'Main Hall'), ('Terrace', 'Terrace'), ('Private Room', 'Private Room'), ('Bar Area', 'Bar Area'), ('Garden', 'Garden'), ('VIP', 'VIP')], default='Main Hall', max_length=20)),
                ('location', models.CharField(blank=True, max_length=255)),
                ('capacity', models.PositiveSmallIntegerField(default=4, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(20)])),
                ('description', models.TextField(blank=True)),
                ('shape', models.CharField(choices=[('round', 'Round'), ('square', 'Square'), ('rectangle', 'Rectangle'), ('oval', 'Oval')], default='square', max_length=20)),
                ('size', models.CharField(choices=[('small', 'Small'), ('medium', 'Medium'), ('large', 'Large')], default='medium', max_length=20)),
                ('is_active', models.BooleanField(default=True)),
                ('status', models.CharField(choices=[('available', 'Available'), ('occupied', 'Occupied'), ('reserved', 'Reserved'), ('cleaning', 'Cleaning'), ('maintenance', 'Maintenance'), ('out_of_service', 'Out of Service')], db_index=True, default='available', max_length=20)),
                ('last_occupied_at', models.DateTimeField(blank=True, null=True)),
                ('last_cleaned_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['table_number'],
                'indexes': [models.Index(fields=['section', 'status'], name='table_section_status_idx')],
            },
        ),
    ]
