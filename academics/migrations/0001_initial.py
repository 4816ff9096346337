import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('teachers', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Subject',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True)),
                ('short_name', models.CharField(blank=True, help_text='e.g., MATH, ENG', max_length=20)),
                ('code', models.CharField(blank=True, help_text='Optional subject code', max_length=20)),
                ('description', models.TextField(blank=True)),
                ('is_core', models.BooleanField(default=True, help_text='Core subjects are mandatory')),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Subject',
                'verbose_name_plural': 'Subjects',
                'ordering': ['-is_core', 'name'],
            },
        ),
        migrations.CreateModel(
            name='Class',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('level_type', models.CharField(choices=[('kg', 'Kindergarten'), ('primary', 'Primary'), ('jhs', 'JHS'), ('shs', 'SHS')], default='primary', max_length=10)),
                ('level_number', models.PositiveSmallIntegerField(help_text='1, 2, 3, etc.')),
                ('section', models.CharField(help_text='A, B, C, etc.', max_length=5)),
                ('name', models.CharField(editable=False, max_length=20)),
                ('capacity', models.PositiveIntegerField(default=35, help_text='Maximum number of students')),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('class_teacher', models.ForeignKey(blank=True, help_text='The form tutor or class teacher responsible for this class.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_classes', to='teachers.teacher')),
            ],
            options={
                'verbose_name': 'Class',
                'verbose_name_plural': 'Classes',
                'ordering': ['level_type', 'level_number', 'section'],
                'unique_together': {('level_type', 'level_number', 'section')},
            },
        ),
        migrations.CreateModel(
            name='ClassTerm',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('class_assigned', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='class_terms', to='academics.class')),
                ('term', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='class_terms', to='core.term')),
            ],
            options={
                'verbose_name': 'Class Term',
                'verbose_name_plural': 'Class Terms',
                'ordering': ['term', 'class_assigned'],
                'unique_together': {('class_assigned', 'term')},
            },
        ),
        migrations.CreateModel(
            name='ClassTermSubject',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('class_term', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='subjects', to='academics.classterm')),
                ('subject', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='class_term_allocations', to='academics.subject')),
                ('teacher', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='subject_assignments', to='teachers.teacher')),
            ],
            options={
                'verbose_name': 'Subject Allocation',
                'verbose_name_plural': 'Subject Allocations',
                'ordering': ['subject__name'],
                'unique_together': {('class_term', 'subject')},
            },
        ),
    ]
