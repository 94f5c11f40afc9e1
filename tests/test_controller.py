import unittest

from s3_throttle.controller import NotConnectedError, S3ThrottleController
from s3_throttle.settings import ThrottleSettings


class FakeS3Client:
    def __init__(self, **config):
        self.config = config
        self.calls = []
        self.responses = [
            {"Contents": [{"Key": "a", "Size": 4}], "IsTruncated": True, "NextMarker": "a"},
            {"Contents": [{"Key": "b", "Size": 6}], "IsTruncated": False},
        ]

    def create_bucket(self, **kwargs):
        self.calls.append(("create_bucket", kwargs))
        return {}

    def list_objects(self, **kwargs):
        self.calls.append(("list_objects", kwargs))
        return self.responses.pop(0)

    def list_objects_v2(self, **kwargs):
        self.calls.append(("list_objects_v2", kwargs))
        return self.responses.pop(0)

    def head_bucket(self, **kwargs):
        self.calls.append(("head_bucket", kwargs))
        return {"BucketRegion": "nyc3"}


class S3ThrottleControllerTests(unittest.TestCase):
    def setUp(self):
        self.clients = []

    def client_factory(self, service_name, **kwargs):
        client = FakeS3Client(service_name=service_name, **kwargs)
        self.clients.append(client)
        return client

    def make_controller(self, settings=None):
        return S3ThrottleController(settings, client_factory=self.client_factory, sleep=lambda _: None)

    def connect(self, controller, region=""):
        return controller.connect(
            endpoint_url="https://nyc3.digitaloceanspaces.com",
            region=region,
            access_key="access",
            secret_key="secret",
        )

    def test_operations_require_connection(self):
        controller = self.make_controller()

        with self.assertRaises(NotConnectedError):
            controller.create_bucket()
        with self.assertRaises(NotConnectedError):
            controller.list_objects("bucket-one")
        with self.assertRaises(NotConnectedError):
            controller.get_bucket_size("bucket-one")
        with self.assertRaises(NotConnectedError):
            controller.run_method("head_bucket", {"Bucket": "bucket-one"})

    def test_connect_builds_client_and_creates_bucket_in_region(self):
        controller = self.make_controller()
        self.connect(controller, region="nyc3")

        bucket = controller.create_bucket("my-bucket")

        client = self.clients[0]
        self.assertEqual("s3", client.config["service_name"])
        self.assertEqual("nyc3", client.config["region_name"])
        self.assertEqual("access", client.config["aws_access_key_id"])
        self.assertEqual("secret", client.config["aws_secret_access_key"])
        self.assertEqual("my-bucket", bucket.name)
        self.assertEqual("nyc3", bucket.region)
        self.assertEqual(
            ("create_bucket", {
                "Bucket": "my-bucket",
                "ACL": "public-read",
                "CreateBucketConfiguration": {"LocationConstraint": "nyc3"},
            }),
            client.calls[0],
        )

    def test_region_can_be_overridden_per_bucket(self):
        controller = self.make_controller()
        self.connect(controller, region="nyc3")

        bucket = controller.create_bucket("my-bucket", region="ams3")

        self.assertEqual("ams3", bucket.region)
        self.assertEqual(
            {"LocationConstraint": "ams3"},
            self.clients[0].calls[0][1]["CreateBucketConfiguration"],
        )

    def test_settings_choose_pagination_and_page_size(self):
        controller = self.make_controller(ThrottleSettings(pagination="marker", page_size=250))
        self.connect(controller)

        result = controller.get_bucket_size("bucket-one")

        self.assertEqual(10, result.size)
        client = self.clients[0]
        self.assertEqual(["list_objects", "list_objects"], [name for name, _ in client.calls])
        self.assertEqual(250, client.calls[0][1]["MaxKeys"])
        self.assertEqual("a", client.calls[1][1]["Marker"])

    def test_settings_configure_scheduler_increment(self):
        controller = self.make_controller(ThrottleSettings(base_increment_ms=200))

        service = self.connect(controller)

        self.assertEqual(200, service.scheduler.base_increment_ms)

    def test_reconnect_keeps_shared_scheduler(self):
        controller = self.make_controller()

        first = self.connect(controller)
        second = self.connect(controller)

        self.assertIsNot(first, second)
        self.assertIs(first.scheduler, second.scheduler)

    def test_run_method_passthrough(self):
        controller = self.make_controller()
        self.connect(controller)

        response = controller.run_method("head_bucket", {"Bucket": "bucket-one"})

        self.assertEqual({"BucketRegion": "nyc3"}, response)
        self.assertEqual(("head_bucket", {"Bucket": "bucket-one"}), self.clients[0].calls[0])


if __name__ == "__main__":
    unittest.main()
