from django.urls import path
from . import views

urlpatterns = [
    path('prices/', views.prices, name='prices'),
    path('staff/', views.staff, name='staff'),
    path('staff/<int:staff_id>/', views.staff_detail, name='staff_detail'),
]
