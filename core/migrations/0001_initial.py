import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('actor', models.CharField(blank=True, db_index=True, max_length=150, verbose_name='actor')),
                ('action', models.CharField(
                    choices=[
                        ('CREATE', 'Create'), ('UPDATE', 'Update'),
                        ('DELETE', 'Delete'), ('STATUS_CHANGE', 'Status Change'),
                    ],
                    db_index=True, max_length=20, verbose_name='action',
                )),
                ('model_name', models.CharField(db_index=True, max_length=100, verbose_name='model')),
                ('object_id', models.CharField(db_index=True, max_length=40, verbose_name='object ID')),
                ('old_values', models.JSONField(blank=True, null=True, verbose_name='old values')),
                ('new_values', models.JSONField(blank=True, null=True, verbose_name='new values')),
                ('timestamp', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='timestamp')),
            ],
            options={
                'verbose_name': 'audit log',
                'verbose_name_plural': 'audit logs',
                'ordering': ['-timestamp'],
                'indexes': [
                    models.Index(fields=['model_name', 'object_id'], name='auditlog_target_idx'),
                    models.Index(fields=['action', 'timestamp'], name='auditlog_action_ts_idx'),
                ],
            },
        ),
    ]
