from django.urls import path
from . import views

app_name = 'users'

urlpatterns = [
    # Authentication
    path('register/', views.register, name='register'),
    path('login/', views.login, name='login'),
    path('logout/', views.logout, name='logout'),

    # User profile
    path('user/', views.get_current_user, name='current-user'),
    path('user/update/', views.update_profile, name='update-profile'),

    # Password reset
    path('password-reset/', views.request_password_reset, name='password-reset'),
    path('password-reset/confirm/', views.confirm_password_reset, name='password-reset-confirm'),
]
