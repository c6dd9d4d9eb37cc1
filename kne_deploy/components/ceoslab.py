# /*
# Copyright 2026 The KNE Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Arista cEOSLab operator."""

from __future__ import annotations

from kne_deploy.components.base import OperatorSpec
from kne_deploy.config import CEOSLabConfig
from kne_deploy.constants import CEOSLAB_DEPLOYMENT, NS_CEOSLAB


class CEOSLabSpec(OperatorSpec):
    config_model = CEOSLabConfig
    name = "ceoslab"
    title = "cEOSLab"
    namespace = NS_CEOSLAB
    deployment = CEOSLAB_DEPLOYMENT
