import aws_cdk as cdk
import sys
import os

# Add the project directory to Python path
sys.path.append(os.path.dirname(__file__))

from restaurant_admin.application_stack import RestaurantAdminApplicationStack
from restaurant_admin.infrastructure_stack import RestaurantAdminInfrastructureStack

app = cdk.App()

alarm_email = app.node.try_get_context("alarm_email") or "ops@example.com"

# Supabase project settings; empty values deploy but every call then fails
supabase_url = app.node.try_get_context("supabase_url") or os.environ.get("SUPABASE_URL", "")
supabase_service_role_key = (
    app.node.try_get_context("supabase_service_role_key")
    or os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")
)

# Deploy infrastructure stack first
infra_stack = RestaurantAdminInfrastructureStack(
    app,
    "RestaurantAdminInfrastructureStack",
    alarm_email=alarm_email,
)

app_stack = RestaurantAdminApplicationStack(
    app,
    "RestaurantAdminApplicationStack",
    infra_stack=infra_stack,
    supabase_url=supabase_url,
    supabase_service_role_key=supabase_service_role_key,
)

app_stack.add_dependency(infra_stack)

app.synth()
