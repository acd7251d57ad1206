"""Libraries assumed to be shipped by the host platform.

A dependency on one of these identities is recorded as skipped instead of being
fetched, unless the project explicitly declares a different version.
"""

from __future__ import annotations

from types import MappingProxyType

PLATFORM_PROVIDED: MappingProxyType[tuple[str, str], str] = MappingProxyType(
    {
        # androidx
        ("androidx.annotation", "annotation"): "1.0.0",
        ("androidx.appcompat", "appcompat"): "1.0.0",
        ("androidx.asynclayoutinflater", "asynclayoutinflater"): "1.0.0",
        ("androidx.collection", "collection"): "1.0.0",
        ("androidx.constraintlayout", "constraintlayout"): "1.1.0",
        ("androidx.constraintlayout", "constraintlayout-solver"): "1.1.0",
        ("androidx.coordinatorlayout", "coordinatorlayout"): "1.0.0",
        ("androidx.core", "core"): "1.0.0",
        ("androidx.arch.core", "core-common"): "2.0.0",
        ("androidx.arch.core", "core-runtime"): "2.0.0",
        ("androidx.cursoradapter", "cursoradapter"): "1.0.0",
        ("androidx.customview", "customview"): "1.0.0",
        ("androidx.drawerlayout", "drawerlayout"): "1.0.0",
        ("androidx.fragment", "fragment"): "1.0.0",
        ("androidx.interpolator", "interpolator"): "1.0.0",
        ("androidx.legacy", "legacy-support-core-ui"): "1.0.0",
        ("androidx.legacy", "legacy-support-core-utils"): "1.0.0",
        ("androidx.lifecycle", "lifecycle-common"): "2.0.0",
        ("androidx.lifecycle", "lifecycle-livedata"): "2.0.0",
        ("androidx.lifecycle", "lifecycle-runtime"): "2.0.0",
        ("androidx.lifecycle", "lifecycle-viewmodel"): "2.0.0",
        ("androidx.loader", "loader"): "1.0.0",
        ("androidx.localbroadcastmanager", "localbroadcastmanager"): "1.0.0",
        ("androidx.print", "print"): "1.0.0",
        ("androidx.slidingpanelayout", "slidingpanelayout"): "1.0.0",
        ("androidx.swiperefreshlayout", "swiperefreshlayout"): "1.0.0",
        ("androidx.vectordrawable", "vectordrawable"): "1.0.0",
        ("androidx.vectordrawable", "vectordrawable-animated"): "1.0.0",
        ("androidx.versionedparcelable", "versionedparcelable"): "1.0.0",
        ("androidx.viewpager", "viewpager"): "1.0.0",
        # other
        ("com.google.code.gson", "gson"): "2.1",
        ("com.google.guava", "guava"): "14.0.1",
    }
)
