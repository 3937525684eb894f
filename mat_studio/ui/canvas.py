import re

from PyQt6.QtWidgets import (QGraphicsView, QGraphicsScene, QGraphicsItem, QGraphicsRectItem,
                             QGraphicsPixmapItem, QGraphicsDropShadowEffect)
from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import (QPainter, QPen, QColor, QImage, QPixmap, QTransform, QPainterPath,
                         QFont, QFontMetricsF)

from .. import config_manager
from ..config import ZOOM_SCALE_BY, MIN_ZOOM, MAX_ZOOM, CANVAS_PADDING, MIN_ZONE_SIZE
from ..logic.grid import grid_lines
from ..logic.selection import BACKGROUND_ID
from ..logic.units import mat_pixel_size
from ..logic.zone import corner_radii, text_offset_y, image_rect
from .images import load_image

HANDLE_SIZE = 10
_RGBA = re.compile(r"rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)")


def parse_color(text, fallback="#000000"):
    """CSS-style colour -> QColor (hex, names, rgb() and rgba())."""
    match = _RGBA.fullmatch((text or "").strip())
    if match:
        r, g, b, a = match.groups()
        color = QColor(int(float(r)), int(float(g)), int(float(b)))
        color.setAlphaF(float(a) if a is not None else 1.0)
        return color
    color = QColor(text or fallback)
    return color if color.isValid() else QColor(fallback)


def rounded_rect_path(w, h, radii):
    """Rectangle path with an independent radius per corner (tl, tr, br, bl)."""
    limit = min(w, h) / 2
    tl, tr, br, bl = (min(r, limit) for r in radii)
    path = QPainterPath()
    path.moveTo(tl, 0)
    path.lineTo(w - tr, 0)
    if tr: path.arcTo(QRectF(w - 2 * tr, 0, 2 * tr, 2 * tr), 90, -90)
    path.lineTo(w, h - br)
    if br: path.arcTo(QRectF(w - 2 * br, h - 2 * br, 2 * br, 2 * br), 0, -90)
    path.lineTo(bl, h)
    if bl: path.arcTo(QRectF(0, h - 2 * bl, 2 * bl, 2 * bl), 270, -90)
    path.lineTo(0, tl)
    if tl: path.arcTo(QRectF(0, 0, 2 * tl, 2 * tl), 180, -90)
    path.closeSubpath()
    return path


class ZoneItem(QGraphicsItem):
    """Draws one zone; geometry comes from the committed zone or the live gesture."""

    def __init__(self, canvas, zone):
        super().__init__()
        self.canvas = canvas
        self.zone = zone
        self.w = zone.width
        self.h = zone.height
        self.image = None
        self._image_source = None
        self.set_zone(zone)

    @property
    def zone_id(self):
        return self.zone.id

    def set_zone(self, zone):
        self.prepareGeometryChange()
        self.zone = zone
        live = self.canvas.session.geometry_for(zone.id) or {}
        self.setPos(live.get("x", zone.x), live.get("y", zone.y))
        self.w = max(MIN_ZONE_SIZE, live.get("width", zone.width))
        self.h = max(MIN_ZONE_SIZE, live.get("height", zone.height))
        self.setRotation(zone.rotation)

        if zone.zone_image != self._image_source:
            self._image_source = zone.zone_image
            self.image = load_image(zone.zone_image) if zone.zone_image else None

        if zone.border_shadow:
            effect = QGraphicsDropShadowEffect()
            effect.setOffset(zone.border_shadow_x, zone.border_shadow_y)
            effect.setBlurRadius(zone.border_shadow_blur)
            effect.setColor(parse_color(zone.border_shadow_color))
            self.setGraphicsEffect(effect)
        else:
            self.setGraphicsEffect(None)
        self.update()

    def _text_height(self):
        return max(self.zone.font_size, 1)

    def boundingRect(self):
        th = self._text_height()
        pad = self.zone.stroke_width + HANDLE_SIZE
        top = min(0, text_offset_y(self._live_zone(), th)) - pad
        bottom = max(self.h, text_offset_y(self._live_zone(), th) + th * 1.5) + pad
        return QRectF(-pad, top, self.w + 2 * pad, bottom - top)

    def _live_zone(self):
        if self.w == self.zone.width and self.h == self.zone.height:
            return self.zone
        return self.zone.model_copy(update={"width": self.w, "height": self.h})

    def handle_rect(self):
        return QRectF(self.w - HANDLE_SIZE / 2, self.h - HANDLE_SIZE / 2, HANDLE_SIZE, HANDLE_SIZE)

    def paint(self, painter, option, widget=None):
        zone = self._live_zone()
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setOpacity(zone.opacity)
        shape = rounded_rect_path(self.w, self.h, corner_radii(zone))

        # === Fill === #
        if not zone.no_fill:
            painter.fillPath(shape, parse_color(zone.fill))

        # === Embedded Image === #
        image = self.image
        if image is not None:
            x, y, w, h = image_rect(zone, image.width(), image.height())
            painter.save()
            painter.setClipPath(shape)
            painter.setOpacity(zone.opacity * zone.image_opacity)
            painter.drawImage(QRectF(x, y, w, h), image)
            painter.restore()

        # === Borders (per edge) === #
        if zone.stroke_width > 0:
            self._paint_borders(painter, zone)

        # === Text === #
        if zone.text:
            self._paint_text(painter, zone)

        # === Selection Decoration === #
        selection = self.canvas.session.selection
        if selection.is_selected(zone.id):
            painter.setOpacity(1.0)
            pen = QPen(QColor(self.canvas.theme.get('selection', '#00aaff')), 1, Qt.PenStyle.DashLine)
            pen.setCosmetic(True)
            painter.setPen(pen)
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(QRectF(0, 0, self.w, self.h))
            if selection.primary_id == zone.id:
                painter.setBrush(QColor(self.canvas.theme.get('selection', '#00aaff')))
                painter.drawRect(self.handle_rect())

    def _paint_borders(self, painter, zone):
        pen = QPen(parse_color(zone.stroke), zone.stroke_width)
        pen.setCapStyle(Qt.PenCapStyle.FlatCap)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        tl, tr, br, bl = (min(r, min(self.w, self.h) / 2) for r in corner_radii(zone))
        w, h = self.w, self.h
        if zone.border_top:
            path = QPainterPath(QPointF(0, tl))
            if tl: path.arcTo(QRectF(0, 0, 2 * tl, 2 * tl), 180, -90)
            path.lineTo(w - tr, 0)
            if tr: path.arcTo(QRectF(w - 2 * tr, 0, 2 * tr, 2 * tr), 90, -90)
            painter.drawPath(path)
        if zone.border_right:
            painter.drawLine(QPointF(w, tr), QPointF(w, h - br))
        if zone.border_bottom:
            path = QPainterPath(QPointF(w, h - br))
            if br: path.arcTo(QRectF(w - 2 * br, h - 2 * br, 2 * br, 2 * br), 0, -90)
            path.lineTo(bl, h)
            if bl: path.arcTo(QRectF(0, h - 2 * bl, 2 * bl, 2 * bl), 270, -90)
            painter.drawPath(path)
        if zone.border_left:
            painter.drawLine(QPointF(0, h - bl), QPointF(0, tl))

    def _paint_text(self, painter, zone):
        font = QFont(zone.font_family)
        font.setPixelSize(max(1, int(zone.font_size)))
        font.setBold('bold' in zone.font_style)
        font.setItalic('italic' in zone.font_style)
        metrics = QFontMetricsF(font)
        top = text_offset_y(zone, zone.font_size)
        x = (self.w - metrics.horizontalAdvance(zone.text)) / 2
        path = QPainterPath()
        path.addText(QPointF(x, top + metrics.ascent()), font, zone.text)

        if zone.text_shadow:
            painter.save()
            painter.translate(zone.text_shadow_x, zone.text_shadow_y)
            shadow = parse_color(zone.text_shadow_color)
            shadow.setAlphaF(shadow.alphaF() * 0.6)
            painter.fillPath(path, shadow)
            painter.restore()
        if zone.text_stroke > 0:
            painter.strokePath(path, QPen(parse_color(zone.text_stroke_color), zone.text_stroke * 2))
        painter.fillPath(path, parse_color(zone.text_color, "#ffffff"))


class GridItem(QGraphicsItem):
    def __init__(self, canvas):
        super().__init__()
        self.canvas = canvas
        self.setAcceptedMouseButtons(Qt.MouseButton.NoButton)

    def boundingRect(self):
        w, h = mat_pixel_size(self.canvas.session.state.mat_size)
        return QRectF(0, 0, w, h)

    def paint(self, painter, option, widget=None):
        state = self.canvas.session.state
        w, h = mat_pixel_size(state.mat_size)
        xs, ys = grid_lines(w, h, state.grid_size)
        pen = QPen(parse_color(self.canvas.theme.get('grid_line', 'rgba(255, 255, 255, 0.2)')), 1)
        pen.setCosmetic(True)
        painter.setPen(pen)
        for x in xs:
            painter.drawLine(QPointF(x, 0), QPointF(x, h))
        for y in ys:
            painter.drawLine(QPointF(0, y), QPointF(w, y))


class Canvas(QGraphicsView):
    """Render surface: draws the session state and turns mouse input into gestures"""

    def __init__(self, session, parent=None):
        super().__init__(parent)
        self.session = session
        self.theme = (config_manager.CONFIG or {}).get('theme', {})
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.NoAnchor)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setBackgroundBrush(QColor(self.theme.get('canvas_bg', '#141414')))

        # === Scene Layers === #
        self.scene_ = QGraphicsScene(self)
        self.setScene(self.scene_)
        self.background_item = QGraphicsPixmapItem()
        self.background_item.setZValue(0)
        self.background_item.setTransformationMode(Qt.TransformationMode.SmoothTransformation)
        self.scene_.addItem(self.background_item)

        self.guide_item = QGraphicsRectItem()
        guide_pen = QPen(QColor(self.theme.get('mat_guide', '#dddddd')), 1)
        guide_pen.setCosmetic(True)
        self.guide_item.setPen(guide_pen)
        self.guide_item.setZValue(1)
        self.scene_.addItem(self.guide_item)

        self.grid_item = GridItem(self)
        self.grid_item.setZValue(2)
        self.scene_.addItem(self.grid_item)
        self._grid_shown = True

        self.zone_items = {}
        self._background_source = None
        self._background_image = None

        # === Input State === #
        self.panning = False
        self.last_mouse_pos = None
        self.drag = None  # (object_id, mode, press scene pos, start geometry)

        self.session.state_changed.connect(self.refresh)
        self.session.selection_changed.connect(self.scene_.update)
        self.session.transient_changed.connect(self._on_transient)
        self.refresh()

    # === STATE -> SCENE === #
    def refresh(self, *_):
        state = self.session.state
        w, h = mat_pixel_size(state.mat_size)
        self.scene_.setSceneRect(QRectF(-w, -h, 3 * w, 3 * h))
        self.guide_item.setRect(QRectF(0, 0, w, h))
        self.grid_item.prepareGeometryChange()
        self.grid_item.setVisible(state.grid_enabled and self._grid_shown)

        present = set()
        for index, zone in enumerate(state.zones):
            present.add(zone.id)
            item = self.zone_items.get(zone.id)
            if item is None:
                item = ZoneItem(self, zone)
                self.zone_items[zone.id] = item
                self.scene_.addItem(item)
            elif item.zone != zone:
                item.set_zone(zone)
            item.setZValue(10 + index)  # list order = z-order, last on top
        for zone_id in list(self.zone_items):
            if zone_id not in present:
                self.scene_.removeItem(self.zone_items.pop(zone_id))

        self._sync_background()
        self.scene_.update()

    def _sync_background(self):
        state = self.session.state
        source = state.background_source.value if state.background_source else None
        if source != self._background_source:
            self._background_source = source
            self._background_image = load_image(source) if source else None
            pixmap = QPixmap.fromImage(self._background_image) if self._background_image else QPixmap()
            self.background_item.setPixmap(pixmap)
        self._apply_background_geometry()

        if self._background_image is not None and state.background is None:
            # Reports back into the session; refresh() runs again with the fitted transform
            self.session.report_background_size(self._background_image.width(), self._background_image.height())

    def _apply_background_geometry(self):
        bg = self.session.state.background
        self.background_item.setVisible(bg is not None and self._background_image is not None)
        if bg is None:
            return
        live = self.session.geometry_for(BACKGROUND_ID) or {}
        self.background_item.setPos(live.get("x", bg.x), live.get("y", bg.y))
        self.background_item.setTransform(QTransform.fromScale(live.get("scale_x", bg.scale_x),
                                                               live.get("scale_y", bg.scale_y)))

    def _on_transient(self, object_id):
        if object_id == BACKGROUND_ID:
            self._apply_background_geometry()
            return
        item = self.zone_items.get(object_id)
        if item is not None:
            item.set_zone(item.zone)

    def fit_to_view(self):
        w, h = mat_pixel_size(self.session.state.mat_size)
        view = self.viewport().rect()
        if w <= 0 or h <= 0 or view.width() <= 0:
            return
        scale = min((view.width() - CANVAS_PADDING) / w, (view.height() - CANVAS_PADDING) / h)
        scale = max(MIN_ZOOM, min(scale, MAX_ZOOM))
        self.setTransform(QTransform.fromScale(scale, scale))
        self.centerOn(w / 2, h / 2)

    # === EXPORT SURFACE === #
    def view_transform(self):
        return self.transform(), self.mapToScene(self.viewport().rect().center())

    def set_view_transform(self, view):
        transform, center = view
        self.setTransform(transform)
        self.centerOn(center)

    def reset_view_transform(self):
        self.resetTransform()
        self.centerOn(0, 0)

    def guides_visible(self):
        return self.guide_item.isVisible()

    def set_guides_visible(self, visible):
        self.guide_item.setVisible(visible)

    def grid_visible(self):
        return self._grid_shown

    def set_grid_visible(self, visible):
        self._grid_shown = visible
        self.grid_item.setVisible(visible and self.session.state.grid_enabled)

    def rasterize(self, width_px, height_px, pixel_ratio):
        image = QImage(round(width_px * pixel_ratio), round(height_px * pixel_ratio),
                       QImage.Format.Format_ARGB32_Premultiplied)
        image.fill(Qt.GlobalColor.transparent)
        painter = QPainter(image)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        try:
            self.scene_.render(painter, QRectF(0, 0, image.width(), image.height()),
                               QRectF(0, 0, width_px, height_px),
                               Qt.AspectRatioMode.IgnoreAspectRatio)
        finally:
            painter.end()
        return image

    # === INPUT === #
    def _object_at(self, scene_pos):
        for item in self.scene_.items(scene_pos):
            if isinstance(item, ZoneItem):
                if QRectF(0, 0, item.w, item.h).contains(item.mapFromScene(scene_pos)):
                    return item.zone_id
            elif item is self.background_item and item.isVisible():
                return BACKGROUND_ID
        return None

    def mousePressEvent(self, event):
        self.setFocus()
        if event.button() == Qt.MouseButton.MiddleButton:
            self.panning = True; self.last_mouse_pos = event.position(); return
        if event.button() != Qt.MouseButton.LeftButton:
            return

        scene_pos = self.mapToScene(event.position().toPoint())
        selection = self.session.selection
        primary = self.zone_items.get(selection.primary_id)
        if primary is not None and primary.handle_rect().contains(primary.mapFromScene(scene_pos)):
            self._start_drag(primary.zone_id, "resize", scene_pos)
            return

        object_id = self._object_at(scene_pos)
        if object_id is None:
            # === Empty space: deselect + pan === #
            selection.clear()
            self.panning = True; self.last_mouse_pos = event.position(); return

        toggling = event.modifiers() & (Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.ShiftModifier)
        if toggling and object_id != BACKGROUND_ID:
            selection.toggle(object_id)
            return
        if not selection.is_selected(object_id) or object_id == BACKGROUND_ID:
            selection.replace(object_id)
        self._start_drag(object_id, "move", scene_pos)

    def _start_drag(self, object_id, mode, scene_pos):
        state = self.session.state
        if object_id == BACKGROUND_ID:
            if state.background is None:
                return
            start = {"x": state.background.x, "y": state.background.y}
        else:
            item = self.zone_items[object_id]
            start = {"x": item.zone.x, "y": item.zone.y, "width": item.zone.width, "height": item.zone.height}
        self.session.begin_transient_edit([object_id])
        self.drag = (object_id, mode, scene_pos, start)

    def mouseMoveEvent(self, event):
        if self.panning:
            delta = event.position() - self.last_mouse_pos
            self.last_mouse_pos = event.position()
            self.translate(delta.x() / self.transform().m11(), delta.y() / self.transform().m22())
            return
        if self.drag is None:
            return
        object_id, mode, origin, start = self.drag
        scene_pos = self.mapToScene(event.position().toPoint())
        if mode == "resize":
            delta = self.resize_delta(self.zone_items[object_id], origin, scene_pos)
            self.session.update_transient_edit(
                object_id,
                width=max(MIN_ZONE_SIZE, start["width"] + delta.x()),
                height=max(MIN_ZONE_SIZE, start["height"] + delta.y()),
            )
        else:
            delta = scene_pos - origin
            self.session.update_transient_edit(object_id, x=start["x"] + delta.x(), y=start["y"] + delta.y())

    def resize_delta(self, item, origin, scene_pos):
        """Drag distance measured along the zone's own axes."""
        return item.mapFromScene(scene_pos) - item.mapFromScene(origin)

    def mouseReleaseEvent(self, event):
        if self.panning:
            self.panning = False; return
        if self.drag is not None:
            self.drag = None
            self.session.commit_edit()

    def wheelEvent(self, event):
        zoom_in = event.angleDelta().y() > 0
        factor = ZOOM_SCALE_BY if zoom_in else 1 / ZOOM_SCALE_BY
        current = self.transform().m11()
        if not (MIN_ZOOM <= current * factor <= MAX_ZOOM):
            return
        # Zoom around the pointer
        anchor = self.mapToScene(event.position().toPoint())
        self.scale(factor, factor)
        moved = self.mapToScene(event.position().toPoint())
        offset = moved - anchor
        self.translate(offset.x(), offset.y())

    def keyPressEvent(self, event):
        key = event.key()
        modifiers = event.modifiers()

        # === Global Undo/Redo + Clipboard === #
        if modifiers & Qt.KeyboardModifier.ControlModifier:
            if key == Qt.Key.Key_Z:
                self.session.undo(); return
            elif key == Qt.Key.Key_Y:
                self.session.redo(); return
            elif key == Qt.Key.Key_C:
                self.session.copy_selection(); return
            elif key == Qt.Key.Key_V:
                self.session.paste(); return

        if key == Qt.Key.Key_Delete:
            self.session.delete_selection(); return
        if key == Qt.Key.Key_Escape:
            self.session.selection.clear(); return
        super().keyPressEvent(event)
