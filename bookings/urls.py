from django.urls import path
from . import views

urlpatterns = [
    path('', views.bookings, name='bookings'),
    path('<int:booking_id>/', views.booking_detail, name='booking_detail'),
    path('<int:booking_id>/confirm/', views.confirm_booking, name='confirm_booking'),
    path('<int:booking_id>/complete/', views.complete_booking, name='complete_booking'),
    path('auto-approve/', views.auto_approve, name='auto_approve'),
    path('quote/', views.quote, name='quote'),
    path('history/', views.customer_history, name='customer_history'),
    path('stats/', views.stats, name='booking_stats'),
    path('reports/revenue/', views.revenue_report, name='revenue_report'),
    path('reports/games/', views.games_report, name='games_report'),
]
