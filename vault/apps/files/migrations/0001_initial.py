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
            name='File',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('storage_key', models.CharField(editable=False, help_text='Server-generated blob key', max_length=64, unique=True)),
                ('original_name', models.CharField(help_text='Filename declared by the uploader', max_length=255)),
                ('mime_type', models.CharField(help_text='MIME type declared by the uploader', max_length=255)),
                ('size_bytes', models.BigIntegerField(help_text='File size in bytes')),
                ('uploaded_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('is_deleted', models.BooleanField(default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='files', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'File',
                'verbose_name_plural': 'Files',
                'ordering': ['-uploaded_at'],
                'indexes': [
                    models.Index(fields=['owner', 'is_deleted', '-uploaded_at'], name='files_owner_listing_idx'),
                    models.Index(fields=['is_deleted', 'deleted_at'], name='files_trash_sweep_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('size_bytes__gte', 0)), name='files_size_non_negative'),
                    models.CheckConstraint(condition=models.Q(models.Q(('deleted_at__isnull', False), ('is_deleted', True)), models.Q(('deleted_at__isnull', True), ('is_deleted', False)), _connector='OR'), name='files_deleted_at_matches_flag'),
                ],
            },
        ),
    ]
