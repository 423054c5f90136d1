from botocore.exceptions import ClientError, NoCredentialsError, NoRegionError
from rich.console import Console
from rich.panel import Panel

from .config import Config
from .region_utils import create_boto3_clients
from .stack_outputs import StackOutputs, StackOutputsError, fetch_stack_outputs


def verify_aws_connectivity(config: Config) -> StackOutputs:
    """
    Performs pre-flight checks before the test runner is even instantiated.
    - Initializes AWS clients.
    - Verifies credentials and region are configured.
    - Reads the stack outputs and verifies the Lambda function exists.
    - Exits gracefully with a clear error message on failure.
    """
    console = Console()
    console.print("\n--- [bold blue]Pre-flight Checks[/bold blue] ---")

    try:
        # 1. Create clients in the stack's region.
        _, cloudformation_client, lambda_client, region = create_boto3_clients(
            config.aws_region
        )
        console.log(f"[green]✓[/green] Boto3 clients initialized successfully using region '{region}'.")

        # 2. Read the three values the stack echoes back.
        outputs = fetch_stack_outputs(cloudformation_client, config.stack_name)
        console.log(f"[green]✓[/green] Stack outputs read for '{config.stack_name}'")
        console.log(f"    API endpoint: [cyan]{outputs.api_url}[/cyan]")
        console.log(f"    IAM role:     [cyan]{outputs.role_arn}[/cyan]")

        # 3. Check Lambda access.
        function_config = lambda_client.get_function_configuration(
            FunctionName=outputs.function_arn
        )
        console.log(
            f"[green]✓[/green] Access confirmed for Lambda function: '{function_config['FunctionName']}'"
            f" ({', '.join(function_config.get('Architectures', []))},"
            f" {len(function_config.get('Layers', []))} layer(s))"
        )

        console.print("[bold green]✅ Pre-flight checks passed.[/bold green]")
        return outputs

    except NoCredentialsError:
        console.print("\n[bold red]❌ PRE-FLIGHT CHECK FAILED[/bold red]\n")
        error_message = (
            "AWS credentials not found. Please configure them using one of the following methods:\n"
            "  1. Environment variables (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY)\n"
            "  2. A shared credentials file (~/.aws/credentials) with a profile.\n"
            "  3. An IAM role attached to the EC2 instance or ECS task."
        )
        console.print(
            Panel(error_message, title="Authentication Error", border_style="red")
        )
        exit(2)

    except NoRegionError:
        console.print("\n[bold red]❌ PRE-FLIGHT CHECK FAILED[/bold red]\n")
        error_message = (
            "An AWS region was not specified. Please configure it using one of the following methods:\n"
            "  1. The --aws-region command-line flag.\n"
            "  2. The 'aws_region' key in your JSON config file.\n"
            "  3. The AWS_REGION or AWS_DEFAULT_REGION environment variables.\n"
            "  4. The 'region' setting in your ~/.aws/config file."
        )
        console.print(
            Panel(error_message, title="Configuration Error", border_style="red")
        )
        exit(2)

    except ClientError as e:
        console.print("\n[bold red]❌ PRE-FLIGHT CHECK FAILED[/bold red]\n")
        error_code = e.response["Error"]["Code"]
        if error_code == "ValidationError":
            error_message = f"Stack not found: '{config.stack_name}'. Was it deployed with `sam deploy`?"
        elif error_code in ("AccessDenied", "AccessDeniedException"):
            error_message = "Access Denied when trying to access an AWS resource. Please check your IAM permissions."
        elif error_code == "ResourceNotFoundException":
            error_message = "The Lambda function listed in the stack outputs does not exist."
        else:
            error_message = f"An unexpected AWS API error occurred: {e}"

        console.print(Panel(error_message, title="AWS API Error", border_style="red"))
        exit(2)

    except StackOutputsError as e:
        console.print("\n[bold red]❌ PRE-FLIGHT CHECK FAILED[/bold red]\n")
        console.print(Panel(str(e), title="Stack Error", border_style="red"))
        exit(2)
