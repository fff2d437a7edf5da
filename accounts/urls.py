# accounts/urls.py
from django.urls import path
from django.contrib.auth.views import LoginView, LogoutView

from accounts import views

app_name = "accounts"

urlpatterns = [
    path("login/", LoginView.as_view(), name="login"),
    path("logout/", LogoutView.as_view(next_page="accounts:login"), name="logout"),
    path("menus/", views.MisMenusView.as_view(), name="menus"),
    path("permisos/alternar/", views.AlternarPermisoView.as_view(), name="alternar_permiso"),
]
