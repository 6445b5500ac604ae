from aws_cdk import (
    Stack,
    Duration,
    aws_lambda as _lambda,
    aws_apigateway as apigateway,
    aws_cloudwatch as cloudwatch,
    aws_cloudwatch_actions as cw_actions,
    CfnOutput,
)
from constructs import Construct


class RestaurantAdminApplicationStack(Stack):
    """Application stack containing the admin Lambda functions and their API"""

    def __init__(self, scope: Construct, id: str, infra_stack, supabase_url: str,
                 supabase_service_role_key: str, **kwargs) -> None:
        super().__init__(scope, id, **kwargs)

        lambda_role = infra_stack.lambda_role
        alarm_topic = infra_stack.alarm_topic

        # ---------------------------------------------------------------------
        # Lambda Layers
        # ---------------------------------------------------------------------
        base_layer = _lambda.LayerVersion(
            self,
            "BaseLayer",
            code=_lambda.Code.from_asset("lambda/layers/base"),
            compatible_runtimes=[_lambda.Runtime.PYTHON_3_12],
            description="adminlib: responses, errors, Supabase client, auth checks",
        )

        requests_layer = _lambda.LayerVersion(
            self,
            "RequestsLayer",
            code=_lambda.Code.from_asset("lambda/layers/requests_layer"),
            compatible_runtimes=[_lambda.Runtime.PYTHON_3_12],
            description="Requests library for HTTP calls to Supabase"
        )

        layers = [base_layer, requests_layer]

        # ---------------------------------------------------------------------
        # Lambda Functions Helper
        # ---------------------------------------------------------------------
        def create_lambda(id: str, handler: str, path: str, timeout: int = 30, memory: int = 256):
            return _lambda.Function(
                self,
                id,
                runtime=_lambda.Runtime.PYTHON_3_12,
                handler=handler,
                code=_lambda.Code.from_asset(path),
                layers=layers,
                role=lambda_role,
                timeout=Duration.seconds(timeout),
                memory_size=memory,
                environment={
                    "SUPABASE_URL": supabase_url,
                    "SUPABASE_SERVICE_ROLE_KEY": supabase_service_role_key,
                },
            )

        # ---------------------------------------------------------------------
        # Lambda Functions - Superadmin
        # ---------------------------------------------------------------------
        delete_user_fn = create_lambda(
            "DeleteUserFunction", "delete_user.handler", "lambda/delete_user"
        )
        transfer_ownership_fn = create_lambda(
            "TransferRestaurantOwnershipFunction",
            "transfer_restaurant_ownership.handler",
            "lambda/transfer_restaurant_ownership",
        )

        # ---------------------------------------------------------------------
        # API Gateway
        # ---------------------------------------------------------------------
        # No gateway-level CORS preflight: the functions answer OPTIONS themselves
        api = apigateway.RestApi(
            self,
            "AdminApi",
            rest_api_name="Restaurant Admin Service",
            deploy_options=apigateway.StageOptions(stage_name="dev"),
        )

        # Callers authenticate with their Supabase access token, checked in the function
        delete_user_route = api.root.add_resource("delete-user")
        delete_user_route.add_method("ANY", apigateway.LambdaIntegration(delete_user_fn))

        transfer_route = api.root.add_resource("transfer-restaurant-ownership")
        transfer_route.add_method("ANY", apigateway.LambdaIntegration(transfer_ownership_fn))

        # ---------------------------------------------------------------------
        # CloudWatch Alarms
        # ---------------------------------------------------------------------
        def add_error_alarm(name: str, fn: _lambda.Function):
            error_alarm = cloudwatch.Alarm(
                self,
                f"{name}ErrorAlarm",
                metric=fn.metric_errors(period=Duration.minutes(5)),
                threshold=1,
                evaluation_periods=1,
                comparison_operator=cloudwatch.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
                alarm_description=f"Error alarm for {name}",
            )
            error_alarm.add_alarm_action(cw_actions.SnsAction(alarm_topic))

            throttle_alarm = cloudwatch.Alarm(
                self,
                f"{name}ThrottleAlarm",
                metric=fn.metric_throttles(period=Duration.minutes(5)),
                threshold=5,
                evaluation_periods=1,
                comparison_operator=cloudwatch.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
                alarm_description=f"Throttle alarm for {name}",
            )
            throttle_alarm.add_alarm_action(cw_actions.SnsAction(alarm_topic))

        add_error_alarm("DeleteUser", delete_user_fn)
        add_error_alarm("TransferRestaurantOwnership", transfer_ownership_fn)

        # ---------------------------------------------------------------------
        # CloudFormation Outputs
        # ---------------------------------------------------------------------
        CfnOutput(self, "ApiUrl", value=api.url)
        CfnOutput(self, "DeleteUserUrl", value=f"{api.url}delete-user")
        CfnOutput(self, "TransferOwnershipUrl", value=f"{api.url}transfer-restaurant-ownership")
