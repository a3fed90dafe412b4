from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response

from accounts.serializers import UserBasicSerializer
from services import RequestContext
from services import connection_graph
from .serializers import (
    ConnectionSerializer,
    ConnectionRequestSerializer,
    ConnectionResponseSerializer,
    BlockSerializer,
)


class ConnectionListView(APIView):
    """
    GET: accepted connections plus pending incoming/outgoing requests.
    """

    def get(self, request):
        ctx = RequestContext.from_request(request)
        bundle = connection_graph.connections_bundle(ctx)
        context = {"current_user_id": ctx.user_id}

        return Response({
            "connections": ConnectionSerializer(bundle["connections"], many=True, context=context).data,
            "incoming_requests": ConnectionSerializer(bundle["incoming_requests"], many=True, context=context).data,
            "outgoing_requests": ConnectionSerializer(bundle["outgoing_requests"], many=True, context=context).data,
            "university": bundle["university"],
        })


class ConnectionRequestView(APIView):
    """
    POST: send a connection request.

    POST Body:
    {
        "user_id": 12
    }
    or
    {
        "username": "jane_doe"
    }
    """

    def post(self, request):
        ctx = RequestContext.from_request(request)
        serializer = ConnectionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if serializer.validated_data.get("user_id") is not None:
            connection = connection_graph.send_request(ctx, serializer.validated_data["user_id"])
        else:
            connection = connection_graph.send_request_by_username(
                ctx, serializer.validated_data["username"]
            )

        return Response(
            ConnectionSerializer(connection, context={"current_user_id": ctx.user_id}).data,
            status=status.HTTP_201_CREATED,
        )


class ConnectionRespondView(APIView):
    """
    POST: addressee accepts or declines a pending request.

    POST Body:
    {
        "accept": true
    }
    """

    def post(self, request, connection_id: int):
        ctx = RequestContext.from_request(request)
        serializer = ConnectionResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        connection = connection_graph.respond(
            ctx, connection_id, serializer.validated_data["accept"]
        )
        return Response(ConnectionSerializer(connection, context={"current_user_id": ctx.user_id}).data)


class ConnectionRemoveView(APIView):
    """
    DELETE: either side cancels a pending request or removes a connection.
    """

    def delete(self, request, connection_id: int):
        ctx = RequestContext.from_request(request)
        connection_graph.remove(ctx, connection_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class BlockUserView(APIView):
    """
    POST: block another user.

    POST Body:
    {
        "user_id": 12
    }
    """

    def post(self, request):
        ctx = RequestContext.from_request(request)
        serializer = BlockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        connection = connection_graph.block(ctx, serializer.validated_data["user_id"])
        return Response(ConnectionSerializer(connection, context={"current_user_id": ctx.user_id}).data)


class UserSearchView(APIView):
    """
    GET: username search.

    Query params:
        q: search term
        same_university: "true" to restrict to the caller's institution
    """

    def get(self, request):
        ctx = RequestContext.from_request(request)
        query = request.query_params.get("q", "")
        same_university = request.query_params.get("same_university", "").lower() in ("1", "true", "yes")

        users = connection_graph.search_usernames(ctx, query, same_university=same_university)
        return Response({"results": UserBasicSerializer(users, many=True).data})
