from aws_cdk import (
    Stack,
    aws_iam as iam,
    aws_sns as sns,
    aws_sns_subscriptions as subs,
    CfnOutput,
)
from constructs import Construct


class RestaurantAdminInfrastructureStack(Stack):
    """Foundational resources shared by the admin functions"""

    def __init__(self, scope: Construct, id: str, alarm_email: str, **kwargs) -> None:
        super().__init__(scope, id, **kwargs)

        # ---------------------------------------------------------------------
        # SNS Topics
        # ---------------------------------------------------------------------
        self.alarm_topic = sns.Topic(
            self,
            "AdminLambdaAlarmTopic",
            topic_name="restaurant-admin-lambda-alarms",
        )

        self.alarm_topic.add_subscription(
            subs.EmailSubscription(alarm_email)
        )

        # ---------------------------------------------------------------------
        # IAM Role for Lambda Functions
        # ---------------------------------------------------------------------
        # Data lives in Supabase, so the functions only need to write logs
        self.lambda_role = iam.Role(
            self,
            "RestaurantAdminLambdaRole",
            assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
            description="Role for restaurant admin Lambda functions",
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    "service-role/AWSLambdaBasicExecutionRole"
                ),
            ],
        )

        # ---------------------------------------------------------------------
        # CloudFormation Outputs
        # ---------------------------------------------------------------------
        CfnOutput(self, "AlarmTopicArn", value=self.alarm_topic.topic_arn)
        CfnOutput(self, "LambdaRoleArn", value=self.lambda_role.role_arn)
