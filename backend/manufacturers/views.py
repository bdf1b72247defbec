import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count, Q
from django.db.models.deletion import ProtectedError
from django.shortcuts import get_object_or_404
from backend.core.utils import create_audit_log
from .models import Manufacturer
from .serializers import ManufacturerSerializer

logger = logging.getLogger('backend.manufacturers')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def manufacturer_list_create(request):
    """List all manufacturers or create a new manufacturer"""
    if request.method == 'GET':
        queryset = Manufacturer.objects.annotate(record_count=Count('analysis_records'))

        search = request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(contact_person__icontains=search) |
                Q(contact__icontains=search) |
                Q(email__icontains=search) |
                Q(phone__icontains=search)
            )

        serializer = ManufacturerSerializer(queryset.order_by('name'), many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = ManufacturerSerializer(data=request.data)
        if serializer.is_valid():
            manufacturer = serializer.save()
            logger.info(f"User {request.user.username} created manufacturer {manufacturer.name}")
            create_audit_log(
                request=request,
                action='create',
                model_name='Manufacturer',
                object_id=manufacturer.id,
                object_name=manufacturer.name,
            )
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def manufacturer_detail(request, pk):
    """Retrieve, update or delete a manufacturer"""
    manufacturer = get_object_or_404(Manufacturer, pk=pk)

    if request.method == 'GET':
        serializer = ManufacturerSerializer(manufacturer)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ManufacturerSerializer(manufacturer, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request,
                action='update',
                model_name='Manufacturer',
                object_id=manufacturer.id,
                object_name=manufacturer.name,
                changes={'fields': sorted(serializer.validated_data.keys())},
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        manufacturer_id = manufacturer.id
        name = manufacturer.name
        try:
            manufacturer.delete()
        except ProtectedError:
            return Response(
                {'error': 'Manufacturer has batches and cannot be deleted'},
                status=status.HTTP_400_BAD_REQUEST
            )
        logger.info(f"User {request.user.username} deleted manufacturer {name}")
        create_audit_log(
            request=request,
            action='delete',
            model_name='Manufacturer',
            object_id=manufacturer_id,
            object_name=name,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)
