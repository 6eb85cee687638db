from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    path('properties/export/', views.export_properties_view, name='properties-export'),
    path('companies/export/', views.export_companies_view, name='companies-export'),
]
