"""Static infrastructure templates for the three supported providers.

Nothing here talks to a cloud. Each renderer fills the project's name (and a
couple of configuration choices, when present) into a fixed template.
"""

import json
import re

from infrawizard.models.project import Project

PROVIDERS = {
    "aws": {
        "name": "AWS CloudFormation",
        "display_name": "Amazon Web Services",
        "estimated_cost": 247,
        "default_region": "us-east-1",
    },
    "gcp": {
        "name": "Google Cloud Deployment Manager",
        "display_name": "Google Cloud Platform",
        "estimated_cost": 198,
        "default_region": "us-central1",
    },
    "azure": {
        "name": "Azure Resource Manager",
        "display_name": "Microsoft Azure",
        "estimated_cost": 289,
        "default_region": "[resourceGroup().location]",
    },
}


def _config_value(project: Project, key: str, default):
    return (project.configuration or {}).get(key, default)


def _region(project: Project, provider: str) -> str:
    # Wizard regions are AWS region names; only AWS uses them verbatim.
    if provider == "aws":
        return _config_value(project, "region", PROVIDERS["aws"]["default_region"])
    return PROVIDERS[provider]["default_region"]


def _backup_days(project: Project) -> int:
    return 7 if _config_value(project, "auto_backups", True) else 0


def _resource_slug(name: str) -> str:
    slug = name.lower().strip()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"[\s]+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-") or "app"


def render_aws(project: Project) -> str:
    region = _region(project, "aws")
    return f"""# AWS CloudFormation Template
AWSTemplateFormatVersion: '2010-09-09'
Description: 'Auto-generated infrastructure for {project.name}'

Parameters:
  Environment:
    Type: String
    Default: production
    AllowedValues: [development, staging, production]

Metadata:
  TargetRegion: {region}

Resources:
  # VPC Configuration
  VPC:
    Type: AWS::EC2::VPC
    Properties:
      CidrBlock: 10.0.0.0/16
      EnableDnsHostnames: true
      EnableDnsSupport: true
      Tags:
        - Key: Name
          Value: !Sub '${{AWS::StackName}}-vpc'

  # Application Load Balancer
  ApplicationLoadBalancer:
    Type: AWS::ElasticLoadBalancingV2::LoadBalancer
    Properties:
      Type: application
      Scheme: internet-facing
      SecurityGroups: [!Ref ALBSecurityGroup]
      Subnets: [!Ref PublicSubnet1, !Ref PublicSubnet2]

  # Auto Scaling Group
  AutoScalingGroup:
    Type: AWS::AutoScaling::AutoScalingGroup
    Properties:
      MinSize: 2
      MaxSize: 10
      DesiredCapacity: 2
      VPCZoneIdentifier: [!Ref PrivateSubnet1, !Ref PrivateSubnet2]
      LaunchTemplate:
        LaunchTemplateId: !Ref LaunchTemplate
        Version: !GetAtt LaunchTemplate.LatestVersionNumber

  # RDS Database
  DatabaseInstance:
    Type: AWS::RDS::DBInstance
    Properties:
      DBInstanceClass: db.t3.micro
      Engine: postgres
      EngineVersion: 13.7
      MultiAZ: true
      StorageEncrypted: true
      BackupRetentionPeriod: {_backup_days(project)}

Outputs:
  ApplicationURL:
    Description: Application Load Balancer URL
    Value: !Sub 'https://${{ApplicationLoadBalancer.DNSName}}'
    Export:
      Name: !Sub '${{AWS::StackName}}-ApplicationURL'"""


def render_gcp(project: Project) -> str:
    region = _region(project, "gcp")
    backups = "true" if _backup_days(project) else "false"
    return f"""# Google Cloud Deployment Manager Template
resources:
- name: vpc-network
  type: compute.v1.network
  properties:
    autoCreateSubnetworks: false
    description: VPC network for {project.name}

- name: app-subnet
  type: compute.v1.subnetwork
  properties:
    network: $(ref.vpc-network.selfLink)
    ipCidrRange: 10.0.1.0/24
    region: {region}
    description: Application subnet

- name: database
  type: sqladmin.v1beta4.instance
  properties:
    databaseVersion: POSTGRES_13
    region: {region}
    settings:
      tier: db-custom-2-4096
      backupConfiguration:
        enabled: {backups}
        startTime: "03:00"
      ipConfiguration:
        ipv4Enabled: true
        authorizedNetworks: []

- name: instance-template
  type: compute.v1.instanceTemplate
  properties:
    properties:
      machineType: n2-standard-2
      disks:
      - boot: true
        initializeParams:
          sourceImage: projects/debian-cloud/global/images/family/debian-11
      networkInterfaces:
      - network: $(ref.vpc-network.selfLink)
        subnetwork: $(ref.app-subnet.selfLink)

- name: managed-instance-group
  type: compute.v1.instanceGroupManager
  properties:
    baseInstanceName: {_resource_slug(project.name)}-instance
    instanceTemplate: $(ref.instance-template.selfLink)
    targetSize: 2
    zone: {region}-a"""


def render_azure(project: Project) -> str:
    database = "[concat(parameters('projectName'), '-database')]"
    template = {
        "$schema": "https://schema.management.azure.com/schemas/2019-04-01/deploymentTemplate.json#",
        "contentVersion": "1.0.0.0",
        "parameters": {
            "environment": {
                "type": "string",
                "defaultValue": "production",
                "allowedValues": ["development", "staging", "production"],
            },
            "projectName": {
                "type": "string",
                "defaultValue": project.name,
                "metadata": {"description": "Name of the project"},
            },
        },
        "variables": {
            "location": _region(project, "azure"),
            "vnetName": "[concat(parameters('projectName'), '-vnet')]",
            "subnetName": "[concat(parameters('projectName'), '-subnet')]",
            "nsgName": "[concat(parameters('projectName'), '-nsg')]",
        },
        "resources": [
            {
                "type": "Microsoft.Network/virtualNetworks",
                "apiVersion": "2021-02-01",
                "name": "[variables('vnetName')]",
                "location": "[variables('location')]",
                "properties": {
                    "addressSpace": {"addressPrefixes": ["10.0.0.0/16"]},
                    "subnets": [
                        {
                            "name": "[variables('subnetName')]",
                            "properties": {
                                "addressPrefix": "10.0.1.0/24",
                                "networkSecurityGroup": {
                                    "id": "[resourceId('Microsoft.Network/networkSecurityGroups', variables('nsgName'))]"
                                },
                            },
                        }
                    ],
                },
                "dependsOn": [
                    "[resourceId('Microsoft.Network/networkSecurityGroups', variables('nsgName'))]"
                ],
            },
            {
                "type": "Microsoft.DBforPostgreSQL/servers",
                "apiVersion": "2017-12-01",
                "name": database,
                "location": "[variables('location')]",
                "sku": {
                    "name": "B_Gen5_2",
                    "tier": "Basic",
                    "capacity": 2,
                    "size": "51200",
                    "family": "Gen5",
                },
                "properties": {
                    "createMode": "Default",
                    "version": "11",
                    "administratorLogin": "dbadmin",
                    "administratorLoginPassword": "[concat('P@ssw0rd', uniqueString(resourceGroup().id))]",
                    "storageProfile": {
                        "storageMB": 51200,
                        "backupRetentionDays": _backup_days(project),
                        "geoRedundantBackup": "Disabled",
                    },
                },
            },
        ],
        "outputs": {
            "vnetId": {
                "type": "string",
                "value": "[resourceId('Microsoft.Network/virtualNetworks', variables('vnetName'))]",
            },
            "databaseFQDN": {
                "type": "string",
                "value": f"[reference(resourceId('Microsoft.DBforPostgreSQL/servers', {database[1:-1]})).fullyQualifiedDomainName]",
            },
        },
    }
    return json.dumps(template, indent=2)


RENDERERS = {
    "aws": render_aws,
    "gcp": render_gcp,
    "azure": render_azure,
}


def generate_templates(project: Project) -> dict[str, dict]:
    """Return one template entry per provider, keyed by provider id."""
    templates = {}
    for provider, render in RENDERERS.items():
        info = PROVIDERS[provider]
        templates[provider] = {
            "name": info["name"],
            "provider": provider,
            "code": render(project),
            "estimated_cost": info["estimated_cost"],
        }
    return templates
