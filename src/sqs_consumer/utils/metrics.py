"""
Module: metrics.py
Description: CloudWatch metrics for consumed batches.

Each processed batch is reported as one PutMetricData call carrying
two datapoints, MessagesReceived and HandlerFailures, both dimensioned
by the queue URL.

Key Components:
- MetricsClient: CloudWatch client bound to a namespace
- publish_batch(): Report one batch's size and failure count
- Metric failures are logged and never reach the processor

Dependencies: boto3, botocore, logger
"""

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from typing import Dict, List, Optional

from sqs_consumer.utils.logger import get_logger

logger = get_logger(__name__)

MESSAGES_RECEIVED = "MessagesReceived"
HANDLER_FAILURES = "HandlerFailures"


class MetricsClient:
    """
    CloudWatch publisher for consumer batches.

    Attributes:
        namespace: CloudWatch namespace for all datapoints
        cloudwatch: boto3 CloudWatch client
    """

    def __init__(self, namespace: str = "SQSConsumer", region_name: Optional[str] = None):
        self.namespace = namespace
        self.cloudwatch = boto3.client('cloudwatch', region_name=region_name)

        logger.info("Metrics client initialized", namespace=namespace)

    @staticmethod
    def batch_datapoints(queue_url: str, received: int, failures: int) -> List[Dict]:
        """Build the MetricData entries for one batch."""
        dimensions = [{'Name': 'QueueUrl', 'Value': queue_url}]
        return [
            {
                'MetricName': MESSAGES_RECEIVED,
                'Dimensions': dimensions,
                'Value': float(received),
                'Unit': 'Count'
            },
            {
                'MetricName': HANDLER_FAILURES,
                'Dimensions': dimensions,
                'Value': float(failures),
                'Unit': 'Count'
            },
        ]

    def publish_batch(self, queue_url: str, received: int, failures: int) -> None:
        """
        Report one processed batch.

        Args:
            queue_url: Queue the batch was received from
            received: Messages in the batch
            failures: Messages whose handler raised
        """
        try:
            self.cloudwatch.put_metric_data(
                Namespace=self.namespace,
                MetricData=self.batch_datapoints(queue_url, received, failures)
            )
        except (ClientError, BotoCoreError) as e:
            logger.warning(
                "Failed to publish batch metrics",
                queue_url=queue_url,
                received=received,
                failures=failures,
                error=str(e),
                namespace=self.namespace
            )
