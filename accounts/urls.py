from django.urls import path

from . import views, views_admin

app_name = "accounts"

urlpatterns = [
    path("signup/", views.register_view, name="register"),
    path("signin/", views.login_view, name="login"),
    path("signout/", views.logout_view, name="logout"),
    path("me/", views.profile_view, name="profile"),
    path("users/", views_admin.users_list, name="users_list"),
    path("users/<int:user_id>/role/", views_admin.change_user_role, name="change_user_role"),
]
