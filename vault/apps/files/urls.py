"""URL routes for files app."""

from django.urls import path

from vault.apps.files import views

app_name = 'files'

urlpatterns = [
    path('', views.file_list, name='list'),
    path('upload/', views.upload, name='upload'),
    path('trash/', views.clear_trash, name='empty-trash'),
    path('download/<str:storage_key>/', views.download, name='download'),
    path('info/<str:storage_key>/', views.info, name='info'),
    path('delete/<str:storage_key>/', views.trash, name='trash'),
    path('restore/<str:storage_key>/', views.restore, name='restore'),
    path(
        'permanent/<str:storage_key>/',
        views.permanent_delete,
        name='permanent-delete',
    ),
]
