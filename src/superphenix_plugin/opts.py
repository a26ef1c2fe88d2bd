"""oslo.config options for the Kube-OVN record store.

The options live in the ``kubeovn`` group.  The YAML configuration loaded by
:mod:`superphenix_plugin.config` is applied on top of them as overrides so
that every knob keeps a single typed definition and default.
"""

from oslo_config import cfg

from kubeovn_netid.store import KUBEOVN_GROUP, KUBEOVN_IP_PLURAL, KUBEOVN_VERSION, KubeOvnIPStore

KUBEOVN_GROUP_NAME = "kubeovn"

kubeovn_opts = [
    cfg.StrOpt('kubeconfig',
               help='Path to a kubeconfig file. When unset the in-cluster '
                    'service account is used, then $KUBECONFIG.'),
    cfg.StrOpt('context',
               help='Kubeconfig context to use.'),
    cfg.StrOpt('api_group',
               default=KUBEOVN_GROUP,
               help='API group of the Kube-OVN IP custom resource.'),
    cfg.StrOpt('api_version',
               default=KUBEOVN_VERSION,
               help='API version of the Kube-OVN IP custom resource.'),
    cfg.StrOpt('ip_plural',
               default=KUBEOVN_IP_PLURAL,
               help='Plural name of the Kube-OVN IP custom resource.'),
    cfg.FloatOpt('request_timeout',
                 min=0,
                 help='Timeout in seconds for every Kubernetes API request. '
                      'Unset means the client default.'),
]


def register_kubeovn_opts(conf: cfg.ConfigOpts) -> None:
    """Register the store options on ``conf`` (idempotent)."""

    conf.register_opts(kubeovn_opts, group=KUBEOVN_GROUP_NAME)


def new_conf() -> cfg.ConfigOpts:
    conf = cfg.ConfigOpts()
    register_kubeovn_opts(conf)
    conf([], project="superphenix-velero-plugin", default_config_files=[])
    return conf


def build_store(conf: cfg.ConfigOpts) -> KubeOvnIPStore:
    group = conf[KUBEOVN_GROUP_NAME]
    return KubeOvnIPStore(
        kubeconfig=group.kubeconfig,
        context=group.context,
        group=group.api_group,
        version=group.api_version,
        plural=group.ip_plural,
        request_timeout=group.request_timeout,
    )
