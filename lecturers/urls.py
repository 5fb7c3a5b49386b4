from django.urls import path
from . import views

app_name = 'lecturers'

urlpatterns = [
    path('api/create-account/', views.create_account, name='create_account'),
]
