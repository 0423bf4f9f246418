"""Static price tables (us-east-1, Linux on-demand, 730 hours per month)."""

# EC2 instance type -> monthly USD
EC2_MONTHLY_PRICING: dict[str, float] = {
    # General purpose
    "t2.micro": 8.76,
    "t2.small": 17.52,
    "t2.medium": 35.04,
    "t2.large": 70.08,
    "t2.xlarge": 140.16,
    "t2.2xlarge": 280.32,
    "t3.micro": 7.30,
    "t3.small": 14.60,
    "t3.medium": 29.20,
    "t3.large": 58.40,
    "t3.xlarge": 116.80,
    "t3.2xlarge": 233.60,
    "t3a.micro": 6.57,
    "t3a.small": 13.14,
    "t3a.medium": 26.28,
    "t3a.large": 52.56,
    "t3a.xlarge": 105.12,
    "t3a.2xlarge": 210.24,
    "t4g.micro": 5.84,
    "t4g.small": 11.68,
    "t4g.medium": 23.36,
    "t4g.large": 46.72,
    "t4g.xlarge": 93.44,
    "t4g.2xlarge": 186.88,
    "m5.large": 77.70,
    "m5.xlarge": 155.40,
    "m5.2xlarge": 310.80,
    "m5.4xlarge": 621.60,
    "m5.8xlarge": 1243.20,
    "m5.12xlarge": 1864.80,
    "m5.16xlarge": 2486.40,
    "m5.24xlarge": 3729.60,
    "m5a.large": 69.93,
    "m5a.xlarge": 139.86,
    "m5a.2xlarge": 279.72,
    "m5a.4xlarge": 559.44,
    "m5a.8xlarge": 1118.88,
    "m5a.12xlarge": 1678.32,
    "m5a.16xlarge": 2237.76,
    "m5a.24xlarge": 3356.64,
    "m6i.large": 77.70,
    "m6i.xlarge": 155.40,
    "m6i.2xlarge": 310.80,
    "m6i.4xlarge": 621.60,
    "m6i.8xlarge": 1243.20,
    "m6i.12xlarge": 1864.80,
    "m6i.16xlarge": 2486.40,
    "m6i.24xlarge": 3729.60,
    "m6i.32xlarge": 4972.80,
    # Compute optimized
    "c5.large": 77.70,
    "c5.xlarge": 155.40,
    "c5.2xlarge": 310.80,
    "c5.4xlarge": 621.60,
    "c5.9xlarge": 1398.60,
    "c5.12xlarge": 1864.80,
    "c5.18xlarge": 2797.20,
    "c5.24xlarge": 3729.60,
    "c5a.large": 69.93,
    "c5a.xlarge": 139.86,
    "c5a.2xlarge": 279.72,
    "c5a.4xlarge": 559.44,
    "c5a.8xlarge": 1118.88,
    "c5a.12xlarge": 1678.32,
    "c5a.16xlarge": 2237.76,
    "c5a.24xlarge": 3356.64,
    "c6i.large": 77.70,
    "c6i.xlarge": 155.40,
    "c6i.2xlarge": 310.80,
    "c6i.4xlarge": 621.60,
    "c6i.8xlarge": 1243.20,
    "c6i.12xlarge": 1864.80,
    "c6i.16xlarge": 2486.40,
    "c6i.24xlarge": 3729.60,
    "c6i.32xlarge": 4972.80,
    # Memory optimized
    "r5.large": 126.48,
    "r5.xlarge": 252.96,
    "r5.2xlarge": 505.92,
    "r5.4xlarge": 1011.84,
    "r5.8xlarge": 2023.68,
    "r5.12xlarge": 3035.52,
    "r5.16xlarge": 4047.36,
    "r5.24xlarge": 6071.04,
    "r5a.large": 113.83,
    "r5a.xlarge": 227.66,
    "r5a.2xlarge": 455.32,
    "r5a.4xlarge": 910.64,
    "r5a.8xlarge": 1821.28,
    "r5a.12xlarge": 2731.92,
    "r5a.16xlarge": 3642.56,
    "r5a.24xlarge": 5463.84,
    "r6i.large": 126.48,
    "r6i.xlarge": 252.96,
    "r6i.2xlarge": 505.92,
    "r6i.4xlarge": 1011.84,
    "r6i.8xlarge": 2023.68,
    "r6i.12xlarge": 3035.52,
    "r6i.16xlarge": 4047.36,
    "r6i.24xlarge": 6071.04,
    "r6i.32xlarge": 8094.72,
    # Storage optimized
    "i3.large": 156.00,
    "i3.xlarge": 312.00,
    "i3.2xlarge": 624.00,
    "i3.4xlarge": 1248.00,
    "i3.8xlarge": 2496.00,
    "i3.16xlarge": 4992.00,
    # GPU
    "p3.2xlarge": 3066.00,
    "p3.8xlarge": 12264.00,
    "p3.16xlarge": 24528.00,
    "g4dn.xlarge": 526.50,
    "g4dn.2xlarge": 1053.00,
    "g4dn.4xlarge": 2106.00,
    "g4dn.8xlarge": 4212.00,
    "g4dn.12xlarge": 6318.00,
    "g4dn.16xlarge": 8424.00,
}

# Conservative estimate for instance types missing from the table
DEFAULT_EC2_MONTHLY_COST = 100.0

# EBS per GB-month, matched by volume family
EBS_PRICE_PER_GB_MONTH: dict[str, float] = {
    "gp3": 0.08,
    "gp2": 0.10,
    "io1": 0.125,
    "io2": 0.125,
    "st1": 0.045,
    "sc1": 0.025,
}
DEFAULT_EBS_FAMILY = "gp3"

SNAPSHOT_PRICE_PER_GB_MONTH = 0.05


def ec2_monthly_cost(instance_type: str) -> float:
    return EC2_MONTHLY_PRICING.get(instance_type.lower(), DEFAULT_EC2_MONTHLY_COST)


def ebs_price_per_gb(volume_type: str) -> float:
    """Per GB-month rate for a volume type; unrecognized types use the gp3 rate."""
    normalized = volume_type.lower()
    for family, price in EBS_PRICE_PER_GB_MONTH.items():
        if family in normalized:
            return price
    return EBS_PRICE_PER_GB_MONTH[DEFAULT_EBS_FAMILY]


def ebs_volume_monthly_cost(volume_type: str, size_gb: int) -> float:
    return size_gb * ebs_price_per_gb(volume_type)


def ebs_snapshot_monthly_cost(size_gb: int) -> float:
    return size_gb * SNAPSHOT_PRICE_PER_GB_MONTH
