from django.urls import path
from . import views

urlpatterns = [
    path('analysis-records/', views.analysis_record_list_create, name='analysis-record-list-create'),
    path('analysis-records/calculate/', views.analysis_record_calculate, name='analysis-record-calculate'),
    path('analysis-records/<int:pk>/', views.analysis_record_detail, name='analysis-record-detail'),
    path('batches/', views.batch_list_create, name='batch-list-create'),
    path('batches/<int:pk>/', views.batch_delete, name='batch-delete'),
    path('batches/<int:pk>/details/', views.batch_details, name='batch-details'),
    path('batches/<int:pk>/export/', views.batch_export, name='batch-export'),
]
